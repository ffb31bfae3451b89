"""Allow ``python -m mcphack_cli``."""

from mcphack_cli.cli import main

if __name__ == "__main__":
    main()
