"""
Service configuration, read from config.yaml with
process environment variables taking precedence.
"""
from typing import Any, Optional
import os
import yaml


class Config(dict):

    def __init__(self, file_name: str):
        super().__init__()
        self.file_name = file_name
        config_path = self.get_resource_path(file_name)
        if os.path.exists(config_path):
            with open(config_path) as config_file:
                self.update(yaml.load(config_file, Loader=yaml.SafeLoader) or {})

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Look up a configuration value, first in the environment
        (the key itself, then its upper case form), then in config.yaml.
        """
        if key in os.environ:
            return os.environ[key]
        if key.upper() in os.environ:
            return os.environ[key.upper()]
        return super().get(key, default)

    @staticmethod
    def get_resource_path(resource_name: str) -> str:
        """Resolve a path relative to the services package directory."""
        return os.path.join(os.path.dirname(__file__), resource_name)


config = Config('config.yaml')
