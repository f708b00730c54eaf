"""Provider base class: configuration namespace, cloning, user data."""

import copy
from abc import ABC, abstractmethod

from ec2iaas.errors import ConfigMissing
from ec2iaas.iaas.userdata import read_user_data


class IaaS(ABC):
    """Base class for IaaS providers.

    A provider instance is bound to a configuration namespace. ``base_name``
    is the provider kind (``ec2``); ``name`` is empty for the stock instance
    and set to the custom name on clones created for ``iaas:custom:<name>``
    sections.
    """

    def __init__(self, base_name, config):
        self.base_name = base_name
        self.name = ""
        self.config = config

    @property
    def display_name(self) -> str:
        return self.name or self.base_name

    def get_config_string(self, key) -> str:
        """Look up *key* in the custom namespace first, then the base one.

        Raises:
            ConfigMissing: the key is set in neither namespace.
        """
        if self.name:
            try:
                return self.config.get_string(f"iaas:custom:{self.name}:{key}")
            except ConfigMissing:
                pass
        return self.config.get_string(f"iaas:{self.base_name}:{key}")

    async def read_user_data(self) -> str:
        return await read_user_data(self)

    def clone(self, name):
        """Return a shallow copy bound to the ``iaas:custom:<name>`` namespace."""
        clone = copy.copy(self)
        clone.name = name
        return clone

    @abstractmethod
    def describe(self) -> str:
        """Human-readable parameter documentation."""

    @abstractmethod
    async def create_machine(self, params, dry_run=False):
        """Provision a machine from *params* and return a Machine."""

    @abstractmethod
    async def delete_machine(self, machine, dry_run=False):
        """Destroy a machine previously returned by create_machine."""
