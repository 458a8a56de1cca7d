"""
Configuration models and validation schemas.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import logging
import os

from ordering.domain.interfaces.base import ValueObject

NO_TIMEOUT = -1
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class OrderingConfiguration(ValueObject):
    """Configuration for the order management core."""

    # Store configuration
    lock_timeout: float = 5.0  # seconds to wait for the store lock, NO_TIMEOUT waits forever

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT  # console lines; log files are always JSON
    log_dir: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_store()
        self._validate_logging()

    def _validate_store(self) -> None:
        """Validate store settings."""
        if isinstance(self.lock_timeout, bool) or not isinstance(self.lock_timeout, (int, float)):
            raise ValueError("lock_timeout must be a number")

        if self.lock_timeout != NO_TIMEOUT and self.lock_timeout <= 0:
            raise ValueError("lock_timeout must be positive or -1 for no timeout")

    def _validate_logging(self) -> None:
        """Validate logging settings."""
        if not isinstance(self.log_level, str) or not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"log_level must be a logging level name, got {self.log_level!r}")

        if not self.log_format or not isinstance(self.log_format, str):
            raise ValueError("log_format must be a non-empty string")

        if "%(message)s" not in self.log_format:
            raise ValueError("log_format must include %(message)s")

        if self.log_dir is not None and (not isinstance(self.log_dir, str) or not self.log_dir.strip()):
            raise ValueError("log_dir must be a non-empty string if provided")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'OrderingConfiguration':
        """Create configuration from dictionary with environment variable support."""
        config_dict = dict(config_dict)

        # Support environment variable overrides
        env_overrides = {
            'lock_timeout': os.getenv('ORDERING_LOCK_TIMEOUT'),
            'log_level': os.getenv('ORDERING_LOG_LEVEL'),
            'log_dir': os.getenv('ORDERING_LOG_DIR'),
        }

        # Apply environment overrides
        for key, env_value in env_overrides.items():
            if env_value is not None:
                if key == 'lock_timeout':
                    config_dict[key] = float(env_value)
                else:
                    config_dict[key] = env_value

        known = {key: value for key, value in config_dict.items() if key in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'lock_timeout': self.lock_timeout,
            'log_level': self.log_level,
            'log_format': self.log_format,
            'log_dir': self.log_dir,
        }
