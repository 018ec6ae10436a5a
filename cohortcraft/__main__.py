"""
Main entry point for the cohortcraft package when executed as a module.

This allows running the package with `python -m cohortcraft`.
"""

from cohortcraft.cli import main

if __name__ == '__main__':
    main()
