"""Allow ``python -m imagery_index``."""

import sys

from imagery_index.cli import main

sys.exit(main())
