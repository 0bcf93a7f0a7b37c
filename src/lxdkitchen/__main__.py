"""Entry point for ``python -m lxdkitchen``."""

from lxdkitchen.cli.main import main


if __name__ == "__main__":
    main()
