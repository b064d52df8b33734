from __future__ import annotations

import base64
import binascii
import logging
import os
from typing import Callable, Dict, List, Optional, Tuple

import requests

from pendant.domain.errors import DownloadError
from pendant.infra.network.common import DEFAULT_TIMEOUT, GITHUB_OWNER, GITHUB_REPO, USER_AGENT

logger = logging.getLogger(__name__)

GLOBAL_TYPES_REPO_PATH = "scripts/globalTypes.d.luau"
RAW_GLOBAL_TYPES_URL = (
    f"https://raw.githubusercontent.com/{GITHUB_OWNER}/{GITHUB_REPO}/main/{GLOBAL_TYPES_REPO_PATH}"
)
CONTENTS_API_URL = (
    f"https://api.github.com/repos/{GITHUB_OWNER}/{GITHUB_REPO}/contents/{GLOBAL_TYPES_REPO_PATH}"
)


def fetch_global_types_raw() -> str:
    """Download the definitions file from raw.githubusercontent.com."""
    headers = {"User-Agent": USER_AGENT}
    response = requests.get(RAW_GLOBAL_TYPES_URL, headers=headers, timeout=DEFAULT_TIMEOUT)
    response.raise_for_status()
    return response.text


def fetch_global_types_api() -> str:
    """Download the definitions file through the GitHub contents API."""
    headers = {"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"}
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"

    response = requests.get(CONTENTS_API_URL, headers=headers, timeout=DEFAULT_TIMEOUT)
    response.raise_for_status()
    payload = response.json()

    content = payload.get("content")
    if not isinstance(content, str) or not content:
        raise DownloadError("GitHub contents API returned no file content.")
    try:
        return base64.b64decode(content).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise DownloadError(f"Unable to decode GitHub contents payload: {e}") from e


DOWNLOAD_METHODS: List[Tuple[str, Callable[[], str]]] = [
    ("raw", fetch_global_types_raw),
    ("api", fetch_global_types_api),
]


def download_global_types(dest_path: str, methods: Optional[List[Tuple[str, Callable[[], str]]]] = None) -> str:
    """
    Fetch globalTypes.d.luau, trying each download method in turn.

    Args:
        dest_path: File to write the definitions to.
        methods: Ordered (name, fetcher) pairs; defaults to raw then API.

    Returns:
        str: Name of the method that succeeded.

    Raises:
        DownloadError: Every method failed.
    """
    errors: Dict[str, str] = {}
    for name, fetch in methods or DOWNLOAD_METHODS:
        try:
            content = fetch()
        except (requests.exceptions.RequestException, DownloadError, ValueError) as e:
            logger.warning(f"globalTypes download via {name} failed: {e}")
            errors[name] = str(e)
            continue

        parent = os.path.dirname(os.path.abspath(dest_path))
        os.makedirs(parent, exist_ok=True)
        with open(dest_path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"Downloaded globalTypes.d.luau via {name}")
        return name

    details = "; ".join(f"{k}: {v}" for k, v in errors.items())
    raise DownloadError(f"Failed to download globalTypes.d.luau ({details})")
