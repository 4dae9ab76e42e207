import sys

from automator.cli import main

sys.exit(main())
