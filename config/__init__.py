"""
Configuration package.

Provides the abstract configuration interface and the environment-backed
implementation used by the console.
"""
from .base import BaseConfiguration, ConfigurationError
from .env import EnvConfiguration

__all__ = [
    'BaseConfiguration',
    'ConfigurationError',
    'EnvConfiguration'
]
