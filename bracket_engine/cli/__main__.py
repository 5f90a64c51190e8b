import sys

from bracket_engine.cli import main

sys.exit(main())
