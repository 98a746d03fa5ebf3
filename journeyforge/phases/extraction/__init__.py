"""
Extraction - strategy cascade from generated text to structured records.
"""

from journeyforge.phases.extraction.engine import PARSE_KINDS, ExtractionEngine, parse_text
from journeyforge.phases.extraction.strategies import Matched, Missed, Strategy

__all__ = [
    "PARSE_KINDS",
    "ExtractionEngine",
    "parse_text",
    "Matched",
    "Missed",
    "Strategy",
]
