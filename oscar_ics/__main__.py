"""
Package entry point.

Allows running the application via:

    python -m oscar_ics

This simply forwards execution to oscar_ics.cli.main().
"""

from oscar_ics.cli import main

if __name__ == "__main__":
    main()
