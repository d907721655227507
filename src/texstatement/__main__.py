"""Allow ``python -m texstatement``."""

from texstatement.ui.cli import main


if __name__ == "__main__":
    main()
