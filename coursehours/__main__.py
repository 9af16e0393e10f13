"""
Package entry point.

Allows running the application via:

    python -m coursehours

This simply forwards execution to coursehours.cli.main().
"""

from coursehours.cli import main

if __name__ == "__main__":
    main()
