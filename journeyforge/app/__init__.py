"""
JourneyForge App - configuration, editing sessions and the CLI.
"""

from journeyforge.app.config import (
    JourneyForgeConfig,
    ParsingConfig,
    RevisionConfig,
    WorkflowConfig,
    get_config,
    reload_config,
    set_config,
)

__all__ = [
    "JourneyForgeConfig",
    "ParsingConfig",
    "RevisionConfig",
    "WorkflowConfig",
    "get_config",
    "reload_config",
    "set_config",
]
