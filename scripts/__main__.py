"""Allow `python -m scripts` by running the commune report."""

import sys

from scripts.commune_report import main

sys.exit(main())
