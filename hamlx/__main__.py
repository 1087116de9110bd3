"""Entry point for ``python -m hamlx``."""

import sys

from hamlx.main import main

if __name__ == "__main__":
    sys.exit(main())
