"""Allow running as ``python -m gdrive``."""

import sys

from gdrive.cli import main

sys.exit(main())
