"""
ConfigSync Custom Exceptions

Defines custom exception classes for the configuration engine: lifecycle
errors, source and store failures, loader errors and watcher failures.
"""

from typing import Any


class ConfigSyncError(Exception):
    """Base exception class for ConfigSync-specific errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(ConfigSyncError):
    """Raised when the engine's own settings are invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.config_key = config_key


class InvalidPathError(ConfigSyncError, ValueError):
    """Raised when a dot-path argument is empty or malformed."""

    def __init__(self, message: str, path: Any = None, **kwargs):
        kwargs.setdefault("error_code", "INVALID_PATH")
        super().__init__(message, **kwargs)
        self.path = path


class ConfigNotLoadedError(ConfigSyncError):
    """Raised when an operation needs a loaded configuration."""

    def __init__(
        self,
        message: str = "Configuration not loaded. Call load() first.",
        **kwargs
    ):
        kwargs.setdefault("error_code", "CONFIG_NOT_LOADED")
        super().__init__(message, **kwargs)


class ConfigReadOnlyError(ConfigSyncError):
    """Raised when a write is attempted on frozen configuration."""

    def __init__(
        self,
        message: str = "Configuration is read-only and cannot be modified.",
        path: str | None = None,
        **kwargs
    ):
        kwargs.setdefault("error_code", "CONFIG_READ_ONLY")
        super().__init__(message, **kwargs)
        self.path = path


class ConfigKeyError(ConfigSyncError):
    """Raised in strict mode when a path does not resolve."""

    def __init__(self, message: str, config_key: str | None = None, **kwargs):
        kwargs.setdefault("error_code", "CONFIG_KEY_MISSING")
        super().__init__(message, **kwargs)
        self.config_key = config_key


class ConfigSourceError(ConfigSyncError):
    """Raised when a configuration source cannot be resolved."""

    def __init__(
        self,
        message: str,
        source_type: str | None = None,
        location: str | None = None,
        **kwargs
    ):
        kwargs.setdefault("error_code", "CONFIG_SOURCE_FAILED")
        super().__init__(message, **kwargs)
        self.source_type = source_type
        self.location = location


class SourceNotWatchableError(ConfigSourceError):
    """Raised when watch() is called on a source that cannot be watched."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "SOURCE_NOT_WATCHABLE")
        super().__init__(message, **kwargs)


class StoreError(ConfigSyncError):
    """Raised when a configuration store operation fails."""

    def __init__(
        self,
        message: str,
        storage_type: str | None = None,
        operation: str | None = None,
        **kwargs
    ):
        kwargs.setdefault("error_code", "CONFIG_STORE_FAILED")
        super().__init__(message, **kwargs)
        self.storage_type = storage_type
        self.operation = operation


class RedisStoreError(StoreError):
    """Raised when Redis store operations fail."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, storage_type="redis", **kwargs)


class WatcherError(ConfigSyncError):
    """Raised after a notification pass in which one or more callbacks failed."""

    def __init__(
        self,
        errors: list[BaseException],
        message: str | None = None,
        **kwargs
    ):
        if message is None:
            joined = "; ".join(str(error) for error in errors)
            message = (
                f"{len(errors)} watcher callback error(s) occurred during "
                f"configuration change notification: {joined}"
            )
        kwargs.setdefault("error_code", "WATCHER_FAILED")
        super().__init__(message, **kwargs)
        self.errors = list(errors)


class ConfigLoadError(ConfigSyncError):
    """Raised when a loader cannot turn source content into configuration."""

    def __init__(self, message: str, location: str | None = None, **kwargs):
        kwargs.setdefault("error_code", "CONFIG_LOAD_FAILED")
        super().__init__(message, **kwargs)
        self.location = location


class UnsupportedFormatError(ConfigSyncError):
    """Raised when no loader supports a source's format."""

    def __init__(self, message: str, format: str | None = None, **kwargs):
        kwargs.setdefault("error_code", "UNSUPPORTED_FORMAT")
        super().__init__(message, **kwargs)
        self.format = format
