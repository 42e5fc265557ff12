"""
Package entry point.

Allows running the application via:

    python -m timetable_normalizer

This simply forwards execution to timetable_normalizer.cli.main().
"""

from timetable_normalizer.cli import main

if __name__ == "__main__":
    main()
