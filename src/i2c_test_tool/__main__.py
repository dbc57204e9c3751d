"""Allow ``python -m i2c_test_tool``."""

import sys

from .cli import main

sys.exit(main())
