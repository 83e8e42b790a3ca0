"""
Storage backends, selected by the scheme of the connection URL.

A backend is any callable taking a `StorageUrl` and returning an open
`StorageConnection`. Only the local `file://` backend ships in-tree.
"""

from typing import Callable, Dict

import structlog

from ..errors import UnsupportedSchemeError
from ..url import StorageUrl
from .base import FileStat, StorageConnection
from .local import LocalStorageConnection

logger = structlog.get_logger(__name__)

BackendFactory = Callable[[StorageUrl], StorageConnection]

_BACKENDS: Dict[str, BackendFactory] = {}


def register_backend(scheme: str, factory: BackendFactory) -> None:
    _BACKENDS[scheme] = factory


def unregister_backend(scheme: str) -> None:
    _BACKENDS.pop(scheme, None)


def connect(url: StorageUrl) -> StorageConnection:
    factory = _BACKENDS.get(url.scheme)
    if factory is None:
        raise UnsupportedSchemeError(
            f"no storage backend available for '{url.scheme}://' URLs"
        )
    logger.debug("Opening storage connection.", scheme=url.scheme, host=url.host)
    return factory(url)


register_backend(LocalStorageConnection.scheme, LocalStorageConnection)

__all__ = [
    "FileStat",
    "LocalStorageConnection",
    "StorageConnection",
    "connect",
    "register_backend",
    "unregister_backend",
]
