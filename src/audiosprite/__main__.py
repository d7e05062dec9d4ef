"""Package entry point for ``python -m audiosprite``."""

from audiosprite.cli import main

if __name__ == "__main__":
    main()
