"""
Configuration module for the timekeeper engine.
"""
from .settings import (
    TimekeeperConfig,
    get_config,
    load_config,
    reload_config
)

__all__ = [
    'TimekeeperConfig',
    'get_config',
    'load_config',
    'reload_config'
]
