"""Allow ``python -m ivyreport``."""

from ivyreport.ui.cli import main


if __name__ == "__main__":
    main()
