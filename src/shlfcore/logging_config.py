# src/shlfcore/logging_config.py
"""
Logging configuration for applications embedding shlfcore.

The library itself only creates module loggers (``logging.getLogger(__name__)``)
and never installs handlers. Applications call :func:`configure_logging`
once at startup to get:

- A console handler gated by :class:`DisplayFilter`
- An optional rotating file handler
- Per-component log level overrides

Configuration comes from the ``logging`` section of the tracking config
(see :class:`~shlfcore.config.TrackingConfig`), a TOML file, or a dict.

Key concept:

    **Display filter**: When ``console_enabled=False`` (the default), the
    console handler still exists but only passes records that carry
    ``extra={"display": True}``. This lets user-facing events such as
    "Achievement unlocked" reach the console while debug chatter stays in
    the log file.

Usage:
    from shlfcore.logging_config import configure_logging, log_display

    configure_logging(app_name="shlf", config={"file_directory": "/tmp/shlf"})

    logger = logging.getLogger("shlf.app")
    log_display(logger, logging.INFO, "Streak is now %d days", streak)
"""

import logging
import os
import sys
import tomllib
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "console_enabled": False,
    "console_level": "WARNING",
    "console_format": "%(levelname)s - %(message)s",
    "file_enabled": True,
    "file_level": "DEBUG",
    "file_directory": "~/.local/share/shlfcore/logs",
    "file_name": "{app}.log",
    "file_format": "%(asctime)s [%(levelname)-8s] %(name)-30s - %(message)s (%(filename)s:%(lineno)d)",
    "rotation_max_bytes": 5 * 1024 * 1024,  # 5 MB
    "rotation_backup_count": 3,
    "display_min_level": "INFO",
    "components": {
        "shlfcore": "INFO",
        "shlfcore.tracking.ledger": "WARNING",
    },
}


def _level(value: Any, default: int) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).upper())
    return level if isinstance(level, int) else default


class DisplayFilter(logging.Filter):
    """Controls which log records pass through to the console handler.

    When the console is globally enabled everything passes and the
    handler's own level does the filtering. Otherwise only records with
    ``record.display = True`` at or above ``display_min_level`` pass.
    """

    def __init__(
        self,
        console_globally_enabled: bool = False,
        display_min_level: int = logging.INFO,
    ) -> None:
        super().__init__()
        self.console_globally_enabled = console_globally_enabled
        self.display_min_level = display_min_level

    def filter(self, record: logging.LogRecord) -> bool:
        if self.console_globally_enabled:
            return True
        if getattr(record, "display", False):
            return record.levelno >= self.display_min_level
        return False


class LoggingManager:
    """
    Singleton that installs and tracks the application's handlers.

    Ensures logging is configured only once unless explicitly forced.
    """

    _instance: Optional["LoggingManager"] = None
    _configured: bool = False
    _log_file_path: Path | None = None
    _console_handler: logging.Handler | None = None
    _file_handler: logging.Handler | None = None

    def __new__(cls) -> "LoggingManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_instance(cls) -> "LoggingManager":
        return cls()

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def get_log_file_path(cls) -> Path | None:
        return cls._log_file_path

    def configure(
        self,
        app_name: str = "shlfcore",
        config: dict[str, Any] | None = None,
        config_file_path: str | Path | None = None,
        force_reconfigure: bool = False,
    ) -> Path | None:
        """
        Install console and file handlers on the root logger.

        Args:
            app_name: Used in the log file name.
            config: Logging section as a dict (merged over the defaults).
            config_file_path: TOML file whose ``[tracking.logging]`` or
                ``[logging]`` table is used when *config* is not given.
            force_reconfigure: Replace handlers even if already configured.

        Returns:
            Path to the log file, or None when file logging is off or failed.
        """
        if LoggingManager._configured and not force_reconfigure:
            return LoggingManager._log_file_path

        log_config = self._load_config(config, config_file_path)

        root_logger = logging.getLogger()
        for handler in (LoggingManager._console_handler, LoggingManager._file_handler):
            if handler is not None:
                root_logger.removeHandler(handler)
                handler.close()
        root_logger.setLevel(logging.DEBUG)

        console_globally_enabled = bool(log_config.get("console_enabled", False))
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(log_config["console_format"]))
        if console_globally_enabled:
            console_handler.setLevel(_level(log_config.get("console_level"), logging.WARNING))
        else:
            # The filter is the sole gate for display=True records
            console_handler.setLevel(logging.DEBUG)
        console_handler.addFilter(
            DisplayFilter(
                console_globally_enabled=console_globally_enabled,
                display_min_level=_level(log_config.get("display_min_level"), logging.INFO),
            )
        )
        root_logger.addHandler(console_handler)
        LoggingManager._console_handler = console_handler

        LoggingManager._file_handler = None
        LoggingManager._log_file_path = None
        if log_config.get("file_enabled", True):
            handler, path = self._create_file_handler(log_config, app_name)
            if handler is not None:
                root_logger.addHandler(handler)
                LoggingManager._file_handler = handler
                LoggingManager._log_file_path = path

        for component_name, level in log_config.get("components", {}).items():
            logging.getLogger(component_name).setLevel(_level(level, logging.INFO))

        LoggingManager._configured = True
        logging.getLogger(__name__).debug(
            "Logging configured for %s (file: %s)", app_name, LoggingManager._log_file_path
        )
        return LoggingManager._log_file_path

    def _load_config(
        self, config: dict[str, Any] | None, config_file_path: str | Path | None
    ) -> dict[str, Any]:
        if config is not None:
            return {**DEFAULT_LOGGING_CONFIG, **config}

        if config_file_path is not None:
            path = Path(config_file_path).expanduser()
            try:
                with open(path, "rb") as f:
                    raw = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                sys.stderr.write(f"Warning: Cannot read logging config {path}: {e}\n")
                return DEFAULT_LOGGING_CONFIG.copy()
            section = raw.get("tracking", {}).get("logging") or raw.get("logging") or {}
            return {**DEFAULT_LOGGING_CONFIG, **section}

        return DEFAULT_LOGGING_CONFIG.copy()

    def _create_file_handler(
        self, config: dict[str, Any], app_name: str
    ) -> tuple[logging.Handler | None, Path | None]:
        log_dir = Path(os.path.expanduser(config.get("file_directory", DEFAULT_LOGGING_CONFIG["file_directory"])))
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            sys.stderr.write(f"Warning: Cannot create log directory {log_dir}: {e}\n")
            return None, None

        try:
            filename = config.get("file_name", "{app}.log").format(app=app_name)
        except (KeyError, ValueError):
            filename = f"{app_name}.log"
        log_file_path = log_dir / filename

        try:
            handler = RotatingFileHandler(
                log_file_path,
                maxBytes=config.get("rotation_max_bytes", DEFAULT_LOGGING_CONFIG["rotation_max_bytes"]),
                backupCount=config.get("rotation_backup_count", DEFAULT_LOGGING_CONFIG["rotation_backup_count"]),
                encoding="utf-8",
            )
        except OSError as e:
            sys.stderr.write(f"Warning: Cannot create log file {log_file_path}: {e}\n")
            return None, None

        handler.setLevel(_level(config.get("file_level"), logging.DEBUG))
        handler.setFormatter(logging.Formatter(config.get("file_format", DEFAULT_LOGGING_CONFIG["file_format"])))
        return handler, log_file_path

    def set_component_level(self, component: str, level: str | int) -> None:
        logging.getLogger(component).setLevel(_level(level, logging.INFO))


# ---------------------------------------------------------------------------
# Public module-level functions
# ---------------------------------------------------------------------------


def configure_logging(
    app_name: str = "shlfcore",
    config: dict[str, Any] | None = None,
    config_file_path: str | Path | None = None,
    force_reconfigure: bool = False,
) -> Path | None:
    """
    Configure logging for the application.

    Example:
        from shlfcore.config import load_tracking_config
        from shlfcore.logging_config import configure_logging

        tracking = load_tracking_config(config_path="~/.config/shlfcore/config.toml")
        configure_logging(app_name="shlf", config=tracking.logging)
    """
    return LoggingManager.get_instance().configure(
        app_name=app_name,
        config=config,
        config_file_path=config_file_path,
        force_reconfigure=force_reconfigure,
    )


def log_display(
    logger: logging.Logger,
    level: int,
    msg: str,
    *args: Any,
    **kwargs: Any,
) -> None:
    """Log a message that also reaches the console in silent mode.

    Sets ``extra={"display": True}``, merged with any caller-supplied
    ``extra``.
    """
    extra = kwargs.pop("extra", None) or {}
    extra["display"] = True
    kwargs["extra"] = extra
    logger.log(level, msg, *args, **kwargs)


def get_log_file_path() -> Path | None:
    return LoggingManager.get_log_file_path()


def set_component_level(component: str, level: str | int) -> None:
    LoggingManager.get_instance().set_component_level(component, level)
