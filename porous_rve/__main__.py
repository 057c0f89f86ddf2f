import sys

from porous_rve.cli import main

sys.exit(main())
