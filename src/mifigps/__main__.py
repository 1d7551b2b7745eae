import sys

from mifigps.cli import main

sys.exit(main())
