"""Entry point for ``python -m reading_lists``."""

import sys

from reading_lists.cli import main

sys.exit(main())
