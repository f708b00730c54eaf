"""Generic IaaS layer: provider base class, machine record, registry, user data."""

from ec2iaas.iaas.base import IaaS
from ec2iaas.iaas.machine import Machine
from ec2iaas.iaas.registry import ProviderRegistry
from ec2iaas.iaas.userdata import DEFAULT_USER_DATA, read_user_data

__all__ = [
    "IaaS",
    "Machine",
    "ProviderRegistry",
    "DEFAULT_USER_DATA",
    "read_user_data",
]
