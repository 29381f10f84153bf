"""manual_rag.config

Configuration subsystem for the manual RAG service.

This package provides structured access to global and component-level
configuration loaded from YAML files. It exposes validated, documented
interfaces rather than raw configuration dictionaries.

Modules
-------
global_config
    Global configuration loader, cached accessors and logging set-up.
"""
from .global_config import GlobalConfig, configure_logging

__all__ = ["GlobalConfig", "configure_logging"]
