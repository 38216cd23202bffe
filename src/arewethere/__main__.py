"""Allow ``python -m arewethere``."""

import sys

from arewethere.cli import main

sys.exit(main())
