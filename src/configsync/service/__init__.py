"""
ConfigSync Service Module
"""

from configsync.service.config_service import ConfigService

__all__ = [
    "ConfigService",
]
