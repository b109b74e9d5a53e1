"""
Package entry point.

Allows running the application via:

    python -m schedulemaker

This simply forwards execution to schedulemaker.cli.main().
"""

from schedulemaker.cli import main

if __name__ == "__main__":
    main()
