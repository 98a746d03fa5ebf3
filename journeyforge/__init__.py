"""
JourneyForge - turns generated project suggestions into a structured
four-phase learning journey.
"""

__version__ = "0.1.0"
