"""Allow ``python -m ghsummary``."""

from __future__ import annotations

import sys

from ghsummary.cli import main

sys.exit(main())
