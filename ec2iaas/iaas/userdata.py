"""User-data (cloud-init bootstrap script) resolution for new instances."""

import logging

import httpx

from ec2iaas.errors import ConfigMissing, UserDataError

logger = logging.getLogger(__name__)

DEFAULT_USER_DATA = """#!/bin/bash
curl -sL https://raw.github.com/tsuru/now/master/run.bash | bash -s -- --docker-only
"""


async def read_user_data(iaas, timeout=60):
    """Return the user-data script for *iaas* as text.

    The namespaced ``user-data`` key selects the source:

    - unset: DEFAULT_USER_DATA
    - empty string: no user data
    - anything else: a URL whose body is the script

    Raises:
        UserDataError: the URL could not be fetched or answered non-200.
    """
    try:
        url = iaas.get_config_string("user-data")
    except ConfigMissing:
        return DEFAULT_USER_DATA
    if not url:
        return ""

    logger.debug(f"Fetching user-data from {url}")
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.get(url, timeout=timeout, follow_redirects=True)
    except httpx.HTTPError as e:
        raise UserDataError(f"Failed to fetch user-data from {url}: {e}") from e
    if resp.status_code != httpx.codes.OK:
        raise UserDataError(f"Invalid user-data status code: {resp.status_code}")
    return resp.text
