from __future__ import annotations

"""
Network Communication Infrastructure.

Facade over the HTTP clients used by pendant.
"""

from pendant.infra.network.types_client import (
    download_global_types,
    fetch_global_types_api,
    fetch_global_types_raw,
)

__all__ = [
    "download_global_types",
    "fetch_global_types_api",
    "fetch_global_types_raw",
]
