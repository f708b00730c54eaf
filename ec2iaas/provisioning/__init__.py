"""Concrete IaaS providers."""

from ec2iaas.provisioning.ec2 import DEFAULT_REGION, EC2IaaS, register

__all__ = [
    "EC2IaaS",
    "DEFAULT_REGION",
    "register",
]
