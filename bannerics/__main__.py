"""
Package entry point.

Allows running the exporter via:

    python -m bannerics

This simply forwards execution to bannerics.cli.main().
"""

from bannerics.cli import main

if __name__ == "__main__":
    main()
