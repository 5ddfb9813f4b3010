"""Entry point for `python -m recentdirs`."""

import sys

from .client.main import main

sys.exit(main())
