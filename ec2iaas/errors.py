"""Error types raised by IaaS providers.

Each error also derives from the closest builtin so callers that only know
about ValueError/LookupError/RuntimeError/TimeoutError keep working.
"""


class IaaSError(Exception):
    """Base class for all provisioning errors."""


class ValidationError(IaaSError, ValueError):
    """A required machine parameter is missing or invalid."""


class ConfigMissing(IaaSError, LookupError):
    """A required configuration value is not set."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"config key '{key}' not found")


class ProviderError(IaaSError, RuntimeError):
    """The provider API call failed."""


class NotFound(IaaSError, LookupError):
    """The provider returned no matching instance."""


class NoInstanceCreated(IaaSError, RuntimeError):
    """The create call succeeded but returned no instances."""


class Timeout(IaaSError, TimeoutError):
    """The instance did not become reachable in time."""


class UserDataError(IaaSError, RuntimeError):
    """Fetching the user-data script failed."""


class UnknownProvider(IaaSError, LookupError):
    """No provider is registered under the requested name."""
