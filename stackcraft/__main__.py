"""Allow ``python -m stackcraft``."""

import sys

from .cli import main

sys.exit(main())
