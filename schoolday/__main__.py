"""
Package entry point.

Allows running the application via:

    python -m schoolday today <feed-url>

This simply forwards execution to schoolday.cli.main().
"""

from schoolday.cli import main

if __name__ == "__main__":
    main()
