"""Allow running FXL with python -m fxl."""

import sys

from fxl.fxl_cli import main


if __name__ == "__main__":
    sys.exit(main())
