"""
ConfigSync Engine Configuration Module

Settings for the engine itself: logging, service policy, Redis store and
source polling defaults, read from CONFIGSYNC_* environment variables.
"""

from configsync.config.settings import EngineSettings, load_settings

__all__ = [
    "EngineSettings",
    "load_settings",
]
