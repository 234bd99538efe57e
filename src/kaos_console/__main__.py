"""Run the console with ``python -m kaos_console``."""

import sys

from kaos_console.app import main

sys.exit(main())
