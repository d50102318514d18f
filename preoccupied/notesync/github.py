"""
GitHub token logic for authenticating pulls and pushes.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import time
from typing import Optional

import httpx
import jwt

from .config import SyncConfig


logger = logging.getLogger(__name__)


GITHUB_API = 'https://api.github.com'


def github_installation_token(
        github_keyfile: str,
        github_app_id: str,
        github_installation_id: str) -> str:
    """
    Get a GitHub installation token for the given app ID and
    installation ID using the private key in github_keyfile.
    Returns the installation token as a string.
    """

    if not (github_app_id and github_installation_id and github_keyfile):
        raise ValueError('github_app_id, github_installation_id, and github_keyfile must be set')

    with open(github_keyfile, 'r') as fk:
        private_key = fk.read()

    payload = {
        'iat': int(time.time()) - 60,
        'exp': int(time.time()) + (10 * 60),
        'iss': github_app_id,
    }

    jwt_token = jwt.encode(payload, private_key, algorithm='RS256')
    headers = {
        'Authorization': f'Bearer {jwt_token}',
        'Accept': 'application/vnd.github+json'
    }

    with httpx.Client() as client:
        r = client.post(
            f'{GITHUB_API}/app/installations/{github_installation_id}/access_tokens',
            headers=headers,
        )
        r.raise_for_status()
        response_data = r.json()

    logger.debug(f'New token for {github_app_id} / {github_installation_id} expires at {response_data.get("expires_at")}')
    return response_data['token']


def config_token(config: SyncConfig) -> Optional[str]:
    """
    The token to authenticate with, if the configuration provides one.
    A static github_token wins over GitHub App credentials.
    """

    if config.github_token:
        return config.github_token

    if not config.github_keyfile:
        return None

    return github_installation_token(
        github_keyfile=config.github_keyfile,
        github_app_id=config.github_app_id,
        github_installation_id=config.github_installation_id
    )


def authenticated_url(git_url: str, git_token: str) -> str:
    """
    Inject the token into an https remote URL
    """

    return git_url.replace('https://', f'https://x-access-token:{git_token}@', 1)


# The end.
