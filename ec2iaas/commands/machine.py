"""Machine command: describe/create/delete machines through an IaaS provider."""

import argparse
import asyncio
import json
import logging
import sys

import yaml

from ec2iaas.config import load_config
from ec2iaas.errors import IaaSError
from ec2iaas.iaas.machine import Machine
from ec2iaas.iaas.registry import ProviderRegistry
from ec2iaas.provisioning import ec2 as ec2_provider

logger = logging.getLogger(__name__)


def _param(value):
    """argparse type for ``key=value`` machine parameters."""
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got '{value}'")
    return key, val


def _load_provider(args):
    """Load config, bootstrap the registry and return the selected provider.

    Exits with status 1 on config or lookup errors.
    """
    try:
        config = load_config(args.config)
        registry = ProviderRegistry(config)
        ec2_provider.register(registry)
        return registry.get(args.iaas)
    except (IaaSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


# ── CLI handlers ───────────────────────────────────────────────────


def handle_describe(args):
    """CLI handler for 'machine describe'."""
    provider = _load_provider(args)
    logger.info(provider.describe())


def handle_create(args):
    """CLI handler for 'machine create'."""
    asyncio.run(_handle_create(args))


async def _handle_create(args):
    provider = _load_provider(args)
    params = dict(args.params or [])
    try:
        machine = await provider.create_machine(params, dry_run=args.dry_run)
    except IaaSError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    if machine is not None:
        logger.info(json.dumps(machine.to_dict(), indent=2))


def handle_delete(args):
    """CLI handler for 'machine delete'."""
    asyncio.run(_handle_delete(args))


async def _handle_delete(args):
    provider = _load_provider(args)
    creation_params = dict(args.params or [])
    if args.region:
        creation_params["region"] = args.region
    machine = Machine(id=args.id, creation_params=creation_params)
    try:
        await provider.delete_machine(machine, dry_run=args.dry_run)
    except IaaSError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


# ── Registration ───────────────────────────────────────────────────


def _add_common_args(parser):
    parser.add_argument("--config", default=None, help="YAML config file (fallback: EC2IAAS_CONFIG env var, then ./ec2iaas.yaml)")
    parser.add_argument("--iaas", default=None, help="Provider name (default: iaas:default from config, else ec2)")


def register_machine_command(subparsers):
    """Register the 'machine' command with describe/create/delete actions."""
    machine_parser = subparsers.add_parser("machine", help="Manage IaaS machines")
    action_subparsers = machine_parser.add_subparsers(dest="action", required=True)

    parser = action_subparsers.add_parser("describe", help="Show the parameters a provider accepts")
    _add_common_args(parser)
    parser.set_defaults(func=handle_describe)

    parser = action_subparsers.add_parser("create", help="Create a machine and wait until it is reachable")
    _add_common_args(parser)
    parser.add_argument(
        "-p",
        "--param",
        dest="params",
        action="append",
        type=_param,
        metavar="KEY=VALUE",
        help="Machine parameter, repeatable (e.g. -p image=ami-123 -p type=m1.small)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print the request without executing")
    parser.set_defaults(func=handle_create)

    parser = action_subparsers.add_parser("delete", help="Terminate a machine")
    _add_common_args(parser)
    parser.add_argument("--id", required=True, help="Provider instance ID")
    parser.add_argument("--region", default=None, help="Region the machine was created in")
    parser.add_argument(
        "-p",
        "--param",
        dest="params",
        action="append",
        type=_param,
        metavar="KEY=VALUE",
        help="Extra creation parameter, repeatable",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print the request without executing")
    parser.set_defaults(func=handle_delete)
