"""Allow running as python -m debrep."""

import sys

from debrep.cli import main

sys.exit(main())
