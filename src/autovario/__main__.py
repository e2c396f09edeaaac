"""Allow ``python -m autovario``."""

from __future__ import annotations

import sys

from autovario.cli import main

sys.exit(main())
