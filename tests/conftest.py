"""Shared pytest fixtures for all test modules."""

import os
import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest
import yaml

import ec2iaas.redact as redact_module
from ec2iaas.config import CONFIG_ENV_VAR, Config
from ec2iaas.provisioning.ec2 import EC2IaaS

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the ec2iaas CLI as a subprocess."""

    def _run(*args):
        env = {k: v for k, v in os.environ.items() if k != CONFIG_ENV_VAR}
        result = subprocess.run(
            [sys.executable, "-m", "ec2iaas.ec2iaas", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env=env,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture
def make_config_file(tmp_path):
    """Return a factory that writes a temporary ec2iaas.yaml."""

    def _make(data):
        config_path = tmp_path / "ec2iaas.yaml"
        with open(config_path, "w") as f:
            yaml.dump(data, f)
        return str(config_path)

    return _make


@pytest.fixture(autouse=True)
def _reset_redaction():
    """Keep secrets registered by one test from leaking into the next."""
    yield
    redact_module._registered.clear()
    redact_module._patterns = None


# ── Provider fixtures ───────────────────────────────────────────────


class FakeClock:
    """Monotonic clock advanced only by its own sleep()."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def config():
    """Config with EC2 credentials under the stock namespace."""
    return Config(
        {
            "iaas": {
                "ec2": {
                    "key-id": "mykey",
                    "secret-key": "mysecret",
                },
            },
        }
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ec2iaas(config, clock):
    """EC2 provider wired to the fake clock so polling never really sleeps."""
    return EC2IaaS(config, sleep=clock.sleep, clock=clock)


@pytest.fixture
def boto3_client():
    """Patched boto3.client factory used by the EC2 provider."""
    with patch("ec2iaas.provisioning.ec2.boto3.client") as factory:
        yield factory


@pytest.fixture
def ec2_client(boto3_client):
    """Mock EC2 client returned by the patched boto3.client."""
    client = MagicMock()
    boto3_client.return_value = client
    return client
