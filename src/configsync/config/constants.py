"""
ConfigSync Default Constants

Literal defaults shared by sources, stores and the engine settings.
"""

# Reserved key carrying provenance metadata in a ConfigData tree
SOURCE_KEY = "__source"

# File sources poll mtime; OS event APIs are not used
DEFAULT_FILE_POLL_INTERVAL_MS = 100
DEFAULT_FILE_SETTLE_DELAY_MS = 50
DEFAULT_FILE_ENCODING = "utf-8"

# Redis store layout: <prefix>root holds the tree, <prefix>cache:<path> the leaf cache
DEFAULT_REDIS_KEY_PREFIX = "config:"
REDIS_ROOT_SUFFIX = "root"
REDIS_CACHE_NAMESPACE = "cache:"
DEFAULT_CACHE_TTL_SECONDS = 3600

SOURCE_TYPE_FILE = "file"
SOURCE_TYPE_HTTP = "http"
SOURCE_TYPE_ENV = "env"
ENV_LOCATION = "env:*"
