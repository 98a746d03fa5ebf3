"""
Entry point for running JourneyForge as a module.

Usage:
    python -m journeyforge parse phases ./suggestions.txt
    python -m journeyforge --help
"""

from journeyforge.app.cli import run

if __name__ == "__main__":
    run()
