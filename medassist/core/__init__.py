"""
Core module - Configuration and cross-cutting concerns.

- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Error hierarchy mapped to HTTP responses
- validators.py     : Input sanitization (text, data URIs, ids)
- rate_limiter.py   : Per-session request throttling
- audit.py          : Request audit and security header middleware
"""
from medassist.core.config import get_settings, Settings
from medassist.core.logging_config import setup_logging, get_logger, LoggerMixin

__all__ = [
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "LoggerMixin",
]
