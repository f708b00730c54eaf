"""Provider registry: name -> provider instance, with custom-named clones."""

import logging

from ec2iaas.errors import ConfigMissing, UnknownProvider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "ec2"


class ProviderRegistry:
    """Holds the IaaS providers known to the host platform.

    Besides directly registered names, ``get`` resolves custom providers
    declared in config as ``iaas:custom:<name>:provider: <base>``; those are
    cloned from the base provider on first use and cached.
    """

    def __init__(self, config):
        self.config = config
        self._providers = {}
        self._custom = {}

    def register(self, name, provider):
        logger.debug(f"Registering IaaS provider '{name}'")
        self._providers[name] = provider
        self._custom.clear()

    def names(self) -> list[str]:
        return sorted(self._providers)

    def default_name(self) -> str:
        try:
            return self.config.get_string("iaas:default")
        except ConfigMissing:
            return DEFAULT_PROVIDER

    def get(self, name=None):
        """Return the provider registered (or configured) under *name*.

        Raises:
            UnknownProvider: neither registered nor declared as custom.
        """
        name = name or self.default_name()
        if name in self._providers:
            return self._providers[name]
        if name in self._custom:
            return self._custom[name]

        try:
            base = self.config.get_string(f"iaas:custom:{name}:provider")
        except ConfigMissing:
            raise UnknownProvider(f"IaaS provider '{name}' not registered") from None
        provider = self._providers.get(base)
        if provider is None:
            raise UnknownProvider(f"IaaS provider '{base}' (for custom '{name}') not registered")

        clone = provider.clone(name)
        self._custom[name] = clone
        return clone
