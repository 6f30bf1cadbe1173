#!/usr/bin/env python3
"""
Lazily-loaded data broadcasting.

A `DataManager` subclass supplies a fetch coroutine, the base class
caches the fetched value and notifies the registered listeners.

---
LazyBroadcast - Lazily-loaded data broadcasting

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

from .manager_config import ManagerConfig, ConfigError, load_config, generate_default
from .data_manager import DataManager, Listener, ErrorHandler
from .callable_data_manager import CallableDataManager
from .log_setup import configure_logging, configure_from

__all__ = [
    "DataManager",
    "CallableDataManager",
    "Listener",
    "ErrorHandler",
    "ManagerConfig",
    "ConfigError",
    "load_config",
    "generate_default",
    "configure_logging",
    "configure_from",
]
