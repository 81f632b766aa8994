import sys

from rootfs_guard.cli import main

sys.exit(main())
