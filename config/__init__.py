"""Configuration management and reference tables."""

from config.config import (
    ConfigManager, Environment, ReferenceData, get_config, get_reference_data,
    initialize_config, load_reference_data
)

__all__ = [
    'ConfigManager',
    'Environment',
    'ReferenceData',
    'get_config',
    'get_reference_data',
    'initialize_config',
    'load_reference_data',
]
