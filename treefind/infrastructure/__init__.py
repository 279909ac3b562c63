"""treefind Infrastructure Layer.

This layer provides services used by the matchers and the finder:
- ConfigManager: Hierarchical configuration (defaults, YAML, environment)
- LRUCache: Small TTL cache for identifier lookups
- Logger: Structured logging system
"""

from .cache_manager import CacheConfig, CacheEntry, LRUCache
from .config_manager import ConfigError
from .config_manager import ConfigManager as Config
from .config_manager import ConfigManager, ConfigSource, get_config_manager, set_global_config
from .logger import Logger, LogLevel, configure_logging, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "configure_logging",
    "get_logger",
    "set_global_logger",
    # Cache exports
    "CacheEntry",
    "CacheConfig",
    "LRUCache",
    # ConfigManager exports
    "ConfigSource",
    "ConfigError",
    "Config",
    "ConfigManager",
    "get_config_manager",
    "set_global_config",
]
