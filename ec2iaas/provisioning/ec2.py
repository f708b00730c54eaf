"""EC2 provider: create/delete machines on Amazon EC2 via boto3."""

import asyncio
import json
import logging
import time

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ec2iaas.errors import ConfigMissing, NoInstanceCreated, NotFound, ProviderError, Timeout, ValidationError
from ec2iaas.iaas.base import IaaS
from ec2iaas.iaas.machine import Machine
from ec2iaas.redact import register_secret

logger = logging.getLogger(__name__)

PROVIDER_NAME = "ec2"
DEFAULT_REGION = "us-east-1"
DEFAULT_WAIT_TIMEOUT = 300
POLL_INTERVAL = 0.5

DESCRIPTION = """EC2 IaaS required params:
  image=<image id>         Image AMI ID
  type=<instance type>     Your template uuid

Optional params:
  region=<region>          Chosen region, defaults to us-east-1
  securityGroup=<group>    Chosen security group
  keyName=<key name>       Key name for machine
"""


# ── API helpers ───────────────────────────────────────────────────


async def _api_call(ec2_handler, operation, **kwargs):
    """Run a blocking boto3 call in a worker thread.

    Raises:
        ProviderError: wrapping any botocore client or transport error.
    """
    try:
        return await asyncio.to_thread(getattr(ec2_handler, operation), **kwargs)
    except (ClientError, BotoCoreError) as e:
        raise ProviderError(f"ec2: {operation} failed: {e}") from e


def _parse_bool(value) -> bool:
    """Case-insensitive 1/t/true/yes; anything else, including garbage, is false."""
    return str(value).strip().lower() in ("1", "t", "true", "yes")


# ── Provider ──────────────────────────────────────────────────────


class EC2IaaS(IaaS):
    """Amazon EC2 IaaS provider.

    Args:
        config: ec2iaas.config.Config holding the ``iaas:ec2`` section.
        sleep: coroutine function used between polls (asyncio.sleep).
        clock: monotonic clock used for the wait timeout (time.monotonic).
    """

    def __init__(self, config, sleep=asyncio.sleep, clock=time.monotonic):
        super().__init__(PROVIDER_NAME, config)
        self._sleep = sleep
        self._clock = clock

    def _optional_config(self, key) -> str:
        try:
            return self.get_config_string(key)
        except ConfigMissing:
            return ""

    def create_ec2_handler(self, region):
        """Build an EC2 client for *region*. No request is sent here.

        Raises:
            ConfigMissing: key-id or secret-key is not configured.
        """
        key_id = self.get_config_string("key-id")
        secret_key = self.get_config_string("secret-key")
        for key, value in (("key-id", key_id), ("secret-key", secret_key)):
            if not value:
                raise ConfigMissing(f"iaas:{self.base_name}:{key}")
        security_token = self._optional_config("security-token")
        endpoint_url = self._optional_config("endpoint-url")
        register_secret(secret_key)
        register_secret(security_token)
        try:
            return boto3.client(
                "ec2",
                region_name=region,
                aws_access_key_id=key_id,
                aws_secret_access_key=secret_key,
                aws_session_token=security_token or None,
                endpoint_url=endpoint_url or None,
            )
        except BotoCoreError as e:
            raise ProviderError(f"ec2: cannot create client for region {region}: {e}") from e

    def _wait_timeout(self) -> int:
        raw = self._optional_config("wait-timeout")
        try:
            timeout = int(raw)
        except ValueError:
            timeout = 0
        return timeout if timeout > 0 else DEFAULT_WAIT_TIMEOUT

    async def wait_for_dns_name(self, ec2_handler, instance):
        """Poll DescribeInstances until *instance* has a public DNS name.

        Returns:
            The freshly described instance dict.

        Raises:
            Timeout: no DNS name within ``wait-timeout`` seconds (default 300).
            NotFound: the provider stopped returning the instance.
            ProviderError: the describe call failed.
        """
        instance_id = instance["InstanceId"]
        max_wait = self._wait_timeout()
        start = self._clock()
        while not instance.get("PublicDnsName"):
            if self._clock() - start > max_wait:
                raise Timeout(f"ec2: time out waiting for instance {instance_id} to start")
            logger.debug(f"ec2: waiting for dnsname for instance {instance_id}")
            await self._sleep(POLL_INTERVAL)
            resp = await _api_call(ec2_handler, "describe_instances", InstanceIds=[instance_id])
            reservations = resp.get("Reservations", [])
            if not reservations or not reservations[0].get("Instances"):
                raise NotFound(f"ec2: no instances returned for {instance_id}")
            instance = reservations[0]["Instances"][0]
        return instance

    def describe(self) -> str:
        return DESCRIPTION

    async def create_machine(self, params, dry_run=False, update_params=True):
        """Launch one instance and wait until it has a public DNS name.

        Args:
            params: machine parameters (image, type, region, securityGroup,
                keyName, ebs-optimized).
            dry_run: log the RunInstances request instead of sending it.
            update_params: write the resolved region back into *params*.

        Returns:
            Machine whose ``creation_params`` hold the resolved parameters,
            or None in dry-run mode.
        """
        image_id = params.get("image")
        if not image_id:
            raise ValidationError("image param required")
        instance_type = params.get("type")
        if not instance_type:
            raise ValidationError("type param required")

        region = params.get("region") or DEFAULT_REGION
        if update_params:
            params["region"] = region
        resolved = dict(params, region=region)

        ebs_optimized = _parse_bool(params.get("ebs-optimized", ""))
        user_data = await self.read_user_data()
        options = {
            "ImageId": image_id,
            "InstanceType": instance_type,
            "UserData": user_data,
            "EbsOptimized": ebs_optimized,
            "MinCount": 1,
            "MaxCount": 1,
        }
        if params.get("keyName"):
            options["KeyName"] = params["keyName"]
        if params.get("securityGroup"):
            options["SecurityGroups"] = [params["securityGroup"]]

        if dry_run:
            logger.info(f"[dry-run] ec2 RunInstances region={region}")
            logger.info(f"[dry-run] request: {json.dumps(options, indent=2)}")
            return None

        ec2_handler = self.create_ec2_handler(region)
        logger.info(f"Creating EC2 instance (image={image_id}, type={instance_type}, region={region})...")
        resp = await _api_call(ec2_handler, "run_instances", **options)
        instances = resp.get("Instances", [])
        if not instances:
            raise NoInstanceCreated("ec2: no instance created")
        run_inst = instances[0]
        instance_id = run_inst["InstanceId"]
        logger.info(f"Instance created (id={instance_id}). Waiting for DNS name...")

        try:
            instance = await self.wait_for_dns_name(ec2_handler, run_inst)
        except BaseException:
            await self._terminate_after_failure(ec2_handler, instance_id)
            raise

        machine = Machine(
            id=instance_id,
            status=run_inst.get("State", {}).get("Name", ""),
            address=instance["PublicDnsName"],
            creation_params=resolved,
            iaas=self.display_name,
        )
        logger.info(f"Instance {instance_id} is reachable at {machine.address}")
        return machine

    async def _terminate_after_failure(self, ec2_handler, instance_id):
        """Best-effort compensating terminate; its own failure is logged, not raised."""
        logger.info(f"Terminating instance {instance_id} after failed wait...")
        try:
            await _api_call(ec2_handler, "terminate_instances", InstanceIds=[instance_id])
        except ProviderError as e:
            logger.warning(f"ec2: failed to terminate instance {instance_id}: {e}")

    async def delete_machine(self, machine, dry_run=False):
        """Terminate the instance behind *machine*.

        Raises:
            ValidationError: ``creation_params`` has no region.
        """
        region = machine.creation_params.get("region")
        if not region:
            raise ValidationError("region creation param required")

        if dry_run:
            logger.info(f"[dry-run] ec2 TerminateInstances region={region} instance={machine.id}")
            return

        ec2_handler = self.create_ec2_handler(region)
        logger.info(f"Terminating EC2 instance '{machine.id}' (region={region})...")
        await _api_call(ec2_handler, "terminate_instances", InstanceIds=[machine.id])
        logger.info("Instance terminated.")


def register(registry):
    """Register a stock EC2 provider bound to the registry's config.

    Called once during application bootstrap.
    """
    provider = EC2IaaS(registry.config)
    registry.register(PROVIDER_NAME, provider)
    return provider
