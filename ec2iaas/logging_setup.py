"""CLI logging setup: simple %(message)s format for standalone commands."""

import logging
import sys

from ec2iaas.redact import SecretRedactingFilter


def setup_cli_logging(verbose=False):
    """Configure root logger with plain message format for CLI commands.

    With *verbose*, DEBUG records (poll progress, request payloads) are shown
    and botocore's own chatter is kept at INFO.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    # Filters on a logger do not see records propagated from child loggers,
    # so the redaction filter goes on the handler.
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)
    for noisy in ("botocore", "boto3", "urllib3", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.INFO if verbose else logging.WARNING)
