"""
JourneyForge Configuration.

Central configuration management. Settings are read from JSON or YAML
files; JOURNEYFORGE_DATA_DIR and JOURNEYFORGE_LOG_LEVEL (optionally from a
.env file) override the file values.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv


load_dotenv()

CONFIG_FILENAME = "journeyforge_config.json"


# ============================================================================
# Default Paths
# ============================================================================


def get_default_data_dir() -> Path:
    """Get the default data directory for JourneyForge."""
    if env_path := os.environ.get("JOURNEYFORGE_DATA_DIR"):
        return Path(env_path)
    return Path.home() / ".journeyforge"


def get_default_snapshots_dir() -> Path:
    return get_default_data_dir() / "snapshots"


# ============================================================================
# Configuration Classes
# ============================================================================


@dataclass
class ParsingConfig:
    """Configuration for the extraction cascade.

    ``max_retries`` is carried for callers that re-request text from the
    generator; the cascade itself never retries.
    """

    enable_fallback: bool = True
    min_confidence: float = 0.3
    max_retries: int = 3
    preserve_markdown: bool = False

    def __post_init__(self):
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError(f"min_confidence must be within [0, 1], got {self.min_confidence}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParsingConfig":
        return cls(**{k: v for k, v in data.items() if hasattr(cls, k)})

    def to_dict(self) -> dict[str, Any]:
        return {
            "enable_fallback": self.enable_fallback,
            "min_confidence": self.min_confidence,
            "max_retries": self.max_retries,
            "preserve_markdown": self.preserve_markdown,
        }


@dataclass
class WorkflowConfig:
    """Configuration for the phase workflow engine."""

    history_limit: int = 50  # Undo stack depth
    allow_iteration: bool = True
    auto_apply_threshold: float = 0.6  # Below this, suggestions need confirmation
    default_duration_weeks: int = 4

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkflowConfig":
        return cls(**{k: v for k, v in data.items() if hasattr(cls, k)})

    def to_dict(self) -> dict[str, Any]:
        return {
            "history_limit": self.history_limit,
            "allow_iteration": self.allow_iteration,
            "auto_apply_threshold": self.auto_apply_threshold,
            "default_duration_weeks": self.default_duration_weeks,
        }


@dataclass
class RevisionConfig:
    max_revisions: int = 50  # Per project, oldest evicted first

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RevisionConfig":
        return cls(**{k: v for k, v in data.items() if hasattr(cls, k)})

    def to_dict(self) -> dict[str, Any]:
        return {"max_revisions": self.max_revisions}


@dataclass
class JourneyForgeConfig:
    """Main configuration for JourneyForge.

    Aggregates all sub-configurations and provides load/save functionality.
    """

    # Paths
    data_dir: Path = field(default_factory=get_default_data_dir)
    snapshots_dir: Path = field(default_factory=get_default_snapshots_dir)

    # Sub-configs
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    revisions: RevisionConfig = field(default_factory=RevisionConfig)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_to_file: bool = False

    def __post_init__(self):
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)
        if isinstance(self.snapshots_dir, str):
            self.snapshots_dir = Path(self.snapshots_dir)

    @property
    def logs_dir(self) -> Path:
        return self.data_dir / "logs"

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "JourneyForgeConfig":
        """Load configuration from a JSON or YAML file.

        Args:
            config_path: Path to config file. If None, uses default location.

        Returns:
            JourneyForgeConfig instance with environment overrides applied
        """
        if config_path is None:
            config_path = get_default_data_dir() / CONFIG_FILENAME

        config_path = Path(config_path)

        if not config_path.exists():
            return cls().apply_env_overrides()

        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        return cls.from_dict(data).apply_env_overrides()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JourneyForgeConfig":
        """Create config from dictionary."""
        data_dir = Path(data.get("data_dir", get_default_data_dir()))
        return cls(
            data_dir=data_dir,
            snapshots_dir=Path(data.get("snapshots_dir", data_dir / "snapshots")),
            parsing=ParsingConfig.from_dict(data.get("parsing", {})),
            workflow=WorkflowConfig.from_dict(data.get("workflow", {})),
            revisions=RevisionConfig.from_dict(data.get("revisions", {})),
            log_level=data.get("log_level", "WARNING"),
            log_to_file=bool(data.get("log_to_file", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_dir": str(self.data_dir),
            "snapshots_dir": str(self.snapshots_dir),
            "parsing": self.parsing.to_dict(),
            "workflow": self.workflow.to_dict(),
            "revisions": self.revisions.to_dict(),
            "log_level": self.log_level,
            "log_to_file": self.log_to_file,
        }

    def apply_env_overrides(self) -> "JourneyForgeConfig":
        """Apply JOURNEYFORGE_* environment variables in place."""
        if env_dir := os.environ.get("JOURNEYFORGE_DATA_DIR"):
            self.data_dir = Path(env_dir)
            self.snapshots_dir = self.data_dir / "snapshots"
        if env_level := os.environ.get("JOURNEYFORGE_LOG_LEVEL"):
            self.log_level = env_level.upper()
        return self

    def save(self, config_path: str | Path | None = None) -> Path:
        """Save configuration as JSON, or YAML when the suffix asks for it.

        Returns:
            Path to saved file
        """
        if config_path is None:
            config_path = self.data_dir / CONFIG_FILENAME

        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            if config_path.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

        return config_path

    def ensure_directories(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.snapshots_dir.mkdir(parents=True, exist_ok=True)


# ============================================================================
# Global Config Instance
# ============================================================================


_global_config: JourneyForgeConfig | None = None


def get_config() -> JourneyForgeConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = JourneyForgeConfig.load()
    return _global_config


def set_config(config: JourneyForgeConfig) -> None:
    global _global_config
    _global_config = config


def reload_config(config_path: str | Path | None = None) -> JourneyForgeConfig:
    """Reload configuration from disk and replace the global instance."""
    global _global_config
    _global_config = JourneyForgeConfig.load(config_path)
    return _global_config
