"""
ConfigSync File Loaders

JSON, YAML and Python-module loaders for file sources.
"""

import importlib.util
import json
import os
import uuid
from typing import Any

import yaml

from configsync.config.constants import SOURCE_TYPE_FILE
from configsync.core.types import ConfigData
from configsync.loaders.base import ensure_mapping, read_text
from configsync.sources.base import ConfigSource
from configsync.utils.exceptions import ConfigLoadError, UnsupportedFormatError
from configsync.utils.logging import get_logger

logger = get_logger(__name__)

_JSON_TYPES = (dict, list, str, int, float, bool, type(None))


def _extension(source: ConfigSource) -> str:
    return os.path.splitext(source.location)[1].lower()


class _FileLoader:
    """Extension-based can_load shared by the file loaders."""

    supported_formats: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()

    def can_load(self, source: ConfigSource) -> bool:
        return source.type == SOURCE_TYPE_FILE and _extension(source) in self.extensions

    def _check(self, source: ConfigSource) -> None:
        if not self.can_load(source):
            raise UnsupportedFormatError(
                f"{self.__class__.__name__} cannot handle source: {source.type} {source.location}",
                format=_extension(source) or source.type,
            )


class JsonConfigLoader(_FileLoader):
    """Loads ``.json`` files."""

    supported_formats = ("json",)
    extensions = (".json",)

    async def load(self, source: ConfigSource) -> ConfigData:
        self._check(source)
        content = read_text(source)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigLoadError(
                f"Invalid JSON syntax in configuration file: {e}",
                location=source.location,
            ) from e
        return ensure_mapping(data, source.location)


class YamlConfigLoader(_FileLoader):
    """Loads ``.yml``/``.yaml`` files with ``yaml.safe_load``."""

    supported_formats = ("yaml", "yml")
    extensions = (".yaml", ".yml")

    async def load(self, source: ConfigSource) -> ConfigData:
        self._check(source)
        content = read_text(source)
        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigLoadError(
                f"Invalid YAML in configuration file: {e}",
                location=source.location,
            ) from e
        return ensure_mapping(data, source.location)


class PythonConfigLoader(_FileLoader):
    """Loads a Python module file.

    Lookup order: a ``CONFIG`` or ``config`` mapping, a ``CONFIG``/``config``
    zero-argument factory returning a mapping, then the module's public
    JSON-compatible globals. The module is executed fresh on every load.
    """

    supported_formats = ("py", "python")
    extensions = (".py",)

    async def load(self, source: ConfigSource) -> ConfigData:
        self._check(source)
        module_name = f"_configsync_module_{uuid.uuid4().hex}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, source.location)
            if spec is None or spec.loader is None:
                raise ConfigLoadError(
                    f"Cannot import configuration module: {source.location}",
                    location=source.location,
                )
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
        except ConfigLoadError:
            raise
        except Exception as e:
            raise ConfigLoadError(
                f"Failed to load Python config from {source.location}: {e}",
                location=source.location,
            ) from e

        return self._extract(module, source.location)

    def _extract(self, module: Any, location: str) -> ConfigData:
        for name in ("CONFIG", "config"):
            value = getattr(module, name, None)
            if isinstance(value, dict):
                return value
            if callable(value):
                try:
                    result = value()
                except Exception as e:
                    raise ConfigLoadError(
                        f"Config factory '{name}' failed in {location}: {e}",
                        location=location,
                    ) from e
                return ensure_mapping(result, location)

        return {
            name: value
            for name, value in vars(module).items()
            if not name.startswith("_") and isinstance(value, _JSON_TYPES)
        }
