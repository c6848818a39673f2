"""
Package entry point.

Allows running the client via:

    python -m scolarite

This simply forwards execution to scolarite.cli.main().
"""

from scolarite.cli import main

if __name__ == "__main__":
    main()
