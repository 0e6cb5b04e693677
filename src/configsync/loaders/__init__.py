"""
ConfigSync Loaders

Format-specific parsing of source content: JSON, YAML, Python modules and
the process environment.
"""

from configsync.loaders.base import ConfigLoader
from configsync.loaders.environment_loader import EnvironmentConfigLoader
from configsync.loaders.file_loaders import JsonConfigLoader, PythonConfigLoader, YamlConfigLoader
from configsync.loaders.loaded_source import LoadedConfigSource, default_loaders

__all__ = [
    "ConfigLoader",
    "JsonConfigLoader",
    "YamlConfigLoader",
    "PythonConfigLoader",
    "EnvironmentConfigLoader",
    "LoadedConfigSource",
    "default_loaders",
]
