"""
Package entry point.

Allows running the application via:

    python -m termcal

This simply forwards execution to termcal.cli.main().
"""

from termcal.cli import main

if __name__ == "__main__":
    main()
