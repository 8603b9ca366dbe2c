"""Allow ``python -m uiforge``."""

import sys

from uiforge.cli import main

sys.exit(main())
