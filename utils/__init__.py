"""
Utilities Package
Configuration loading shared by the CLI and the pipelines
"""

from .config import AppConfig, NetworkConfig, load_config

__all__ = ['AppConfig', 'NetworkConfig', 'load_config']
