"""YAML-backed configuration store with colon-separated key paths.

Keys address nested mappings, e.g. ``iaas:ec2:key-id`` reads
``config["iaas"]["ec2"]["key-id"]``.
"""

import logging
import os

import yaml

from ec2iaas.errors import ConfigMissing

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "EC2IAAS_CONFIG"
DEFAULT_CONFIG_PATH = "ec2iaas.yaml"


class Config:
    """In-memory configuration tree."""

    def __init__(self, data=None):
        self._data = data if data is not None else {}

    def get(self, key: str):
        """Return the value at *key*, raising ConfigMissing if it is not set."""
        node = self._data
        for part in key.split(":"):
            if not isinstance(node, dict) or part not in node:
                raise ConfigMissing(key)
            node = node[part]
        return node

    def get_string(self, key: str) -> str:
        """Return the value at *key* as a string.

        Scalars (ints, bools) are converted. A null value (a bare ``key:`` in
        YAML) counts as unset; mappings and lists are rejected.
        """
        value = self.get(key)
        if value is None or isinstance(value, (dict, list)):
            raise ConfigMissing(key)
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def set(self, key: str, value) -> None:
        node = self._data
        parts = key.split(":")
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def unset(self, key: str) -> None:
        node = self._data
        parts = key.split(":")
        for part in parts[:-1]:
            node = node.get(part)
            if not isinstance(node, dict):
                return
        node.pop(parts[-1], None)


def resolve_config_path(config_path=None) -> str:
    """Pick the config file: explicit path, then $EC2IAAS_CONFIG, then ./ec2iaas.yaml."""
    return config_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def load_config(config_path=None) -> Config:
    """Load configuration from a YAML file.

    A missing file yields an empty config so that commands which need no
    credentials (describe, dry-run) still work.
    """
    path = os.path.expanduser(resolve_config_path(config_path))
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug(f"Config file '{path}' not found, using empty config.")
        return Config()

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file '{path}' must contain a mapping at the top level")
    return Config(data)
