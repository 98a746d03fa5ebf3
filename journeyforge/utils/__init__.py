"""
Utility modules - logging and ID generation.
"""

from journeyforge.utils.ids import generate_id
from journeyforge.utils.logging import get_logger, setup_logging

__all__ = [
    "generate_id",
    "get_logger",
    "setup_logging",
]
