"""
Configuration management for homegraph.

Handles:
- Default agent user id for Sync responses
- Execute dispatch mode
- Debug string exposure in responses
- Attribute checking on declare
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Default paths
DEFAULT_DATA_DIR = Path.home() / ".homegraph"


@dataclass
class Config:
    """
    Main homegraph configuration.

    Stored at ~/.homegraph/config.json
    """
    # Sync
    agent_user_id: Optional[str] = None

    # Execute
    parallel_execution: bool = False  # gather executor calls across devices
    include_debug_strings: bool = True

    # Declare
    strict_attributes: bool = True

    log_level: str = "WARNING"

    # Paths
    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)

    @property
    def config_path(self) -> Path:
        return self.data_dir / "config.json"

    def to_dict(self) -> dict:
        return {
            "agent_user_id": self.agent_user_id,
            "parallel_execution": self.parallel_execution,
            "include_debug_strings": self.include_debug_strings,
            "strict_attributes": self.strict_attributes,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: dict, data_dir: Optional[Path] = None) -> "Config":
        # Filter to only known fields to handle config evolution
        known_fields = {
            "agent_user_id", "parallel_execution", "include_debug_strings", "strict_attributes", "log_level",
        }
        filtered = {k: v for k, v in data.items() if k in known_fields}
        return cls(data_dir=data_dir or DEFAULT_DATA_DIR, **filtered)

    def save(self) -> None:
        """Save configuration to disk."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.debug(f"Configuration saved to {self.config_path}")

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> "Config":
        """Load configuration from disk, falling back to defaults."""
        data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        config_path = data_dir / "config.json"

        if not config_path.exists():
            return cls(data_dir=data_dir)

        with open(config_path, 'r') as f:
            data = json.load(f)

        logger.debug(f"Configuration loaded from {config_path}")
        return cls.from_dict(data, data_dir=data_dir)


# Global config instance
_config: Optional[Config] = None


def get_config(data_dir: Optional[Path] = None) -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load(data_dir)
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
