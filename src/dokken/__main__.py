"""Main entry point for ``python -m dokken``."""

from dokken.cli.main import main


if __name__ == "__main__":
    main()
