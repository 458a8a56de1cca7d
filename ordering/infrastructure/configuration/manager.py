"""
Configuration manager implementation with validation and hot-reload support.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional, Callable, List
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
import threading
import time

from ordering.domain.exceptions import ConfigurationError
from ordering.domain.interfaces.base import ILogger
from ordering.domain.models.configuration import OrderingConfiguration


class ConfigurationFileHandler(FileSystemEventHandler):
    """File system event handler for configuration hot-reload."""

    def __init__(self, config_manager: 'ConfigurationManager'):
        self.config_manager = config_manager
        self.last_modified = 0.0
        self.debounce_seconds = 1.0  # Prevent multiple rapid reloads

    def on_modified(self, event):
        """Handle file modification events."""
        if event.is_directory:
            return

        current_time = time.time()
        if current_time - self.last_modified < self.debounce_seconds:
            return

        if Path(event.src_path) != self.config_manager.config_file_path:
            return

        self.last_modified = current_time
        self.config_manager.reload()


class ConfigurationManager:
    """Configuration manager with validation and hot-reload capabilities."""

    def __init__(self, config_file_path: str, logger: ILogger):
        self.config_file_path = Path(config_file_path)
        self.logger = logger
        self._config_data: Dict[str, Any] = {}
        self._ordering_config: Optional[OrderingConfiguration] = None
        self._observers: List[Observer] = []
        self._change_callbacks: List[Callable[[Dict[str, Any]], None]] = []
        self._lock = threading.RLock()

        self._load_configuration()

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key."""
        with self._lock:
            return self._config_data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        The raw value is kept even when it does not validate; the typed
        configuration keeps its last valid state until it is fixed.
        """
        with self._lock:
            self._config_data[key] = value
            try:
                self._rebuild_config()
            except ConfigurationError:
                self.logger.warning(f"Configuration value {key!r} is invalid", key=key, value=value)

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration data."""
        with self._lock:
            return self._config_data.copy()

    def validate(self) -> bool:
        """Validate current configuration."""
        try:
            with self._lock:
                OrderingConfiguration.from_dict(self._config_data)
            return True
        except (ValueError, TypeError) as e:
            self.logger.error(f"Configuration validation failed: {e}")
            return False

    def reload(self) -> bool:
        """Reload configuration from file."""
        try:
            with self._lock:
                with open(self.config_file_path, 'r', encoding='utf-8') as f:
                    new_config = json.load(f)

                # Validate before replacing anything
                OrderingConfiguration.from_dict(new_config)

                self._config_data = new_config
                self._rebuild_config()

                self.logger.info(f"Configuration reloaded from {self.config_file_path}")

                callbacks = list(self._change_callbacks)
                data = self._config_data.copy()

        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON in configuration file: {e}")
            return False
        except (OSError, ValueError, TypeError, ConfigurationError) as e:
            self.logger.error(f"Failed to reload configuration: {e}")
            return False

        for callback in callbacks:
            try:
                callback(data)
            except Exception as e:
                self.logger.error(f"Configuration change callback failed: {e}")

        return True

    def get_ordering_config(self) -> OrderingConfiguration:
        """Get typed configuration object."""
        with self._lock:
            if self._ordering_config is None:
                self._rebuild_config()
            return self._ordering_config

    def start_hot_reload(self) -> None:
        """Start watching configuration file for changes."""
        if not self.config_file_path.exists():
            self.logger.warning(f"Configuration file {self.config_file_path} does not exist")
            return

        event_handler = ConfigurationFileHandler(self)
        observer = Observer()
        observer.schedule(
            event_handler,
            str(self.config_file_path.parent),
            recursive=False
        )
        observer.start()
        self._observers.append(observer)

        self.logger.info(f"Started hot-reload for configuration file: {self.config_file_path}")

    def stop_hot_reload(self) -> None:
        """Stop watching configuration file for changes."""
        for observer in self._observers:
            observer.stop()
            observer.join()
        self._observers.clear()
        self.logger.info("Stopped configuration hot-reload")

    def add_change_callback(self, callback: Callable[[Dict[str, Any]], None]) -> None:
        """Add callback to be called when configuration changes."""
        self._change_callbacks.append(callback)

    def _load_configuration(self) -> None:
        """Load configuration from file or create default."""
        if self.config_file_path.exists():
            if not self.reload():
                raise ConfigurationError(
                    f"Invalid configuration file {self.config_file_path}",
                    context={'path': str(self.config_file_path)}
                )
        else:
            self.logger.info(f"Configuration file {self.config_file_path} not found, using defaults")
            self._config_data = OrderingConfiguration().to_dict()
            self._rebuild_config()
            self._save_configuration()

    def _rebuild_config(self) -> None:
        """Rebuild typed configuration object."""
        try:
            self._ordering_config = OrderingConfiguration.from_dict(self._config_data)
        except (ValueError, TypeError) as e:
            self.logger.error(f"Failed to rebuild configuration: {e}")
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _save_configuration(self) -> None:
        """Save current configuration to file."""
        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.config_file_path, 'w', encoding='utf-8') as f:
                json.dump(self._config_data, f, indent=4)

            self.logger.info(f"Configuration saved to {self.config_file_path}")

        except OSError as e:
            self.logger.error(f"Failed to save configuration: {e}")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - cleanup resources."""
        self.stop_hot_reload()
