"""Allow ``python -m webext_typegen``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
