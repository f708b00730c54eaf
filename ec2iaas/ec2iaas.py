#!/usr/bin/env python3
"""EC2 IaaS tools CLI entrypoint."""

import argparse

from ec2iaas.commands.machine import register_machine_command
from ec2iaas.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="EC2 IaaS tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_machine_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
