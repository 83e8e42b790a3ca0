from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from ..session import XlatorOption
    from ..url import StorageUrl

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FileStat:
    path: str
    size: int
    mode: int
    mtime: float
    is_dir: bool
    nlink: int = 1
    uid: Optional[int] = None
    gid: Optional[int] = None


class StorageConnection(ABC):
    """
    The abstract "contract" for a connection to one storage volume.

    Paths are always relative to the root of the volume; a leading slash is
    accepted and ignored. Backends report failures as `StorageError`.
    """

    scheme: Optional[str] = None

    def __init__(self, url: "StorageUrl"):
        self.url = url

    @abstractmethod
    def apply_xlator_option(self, option: "XlatorOption") -> None:
        raise NotImplementedError

    @abstractmethod
    def open_read(self, path: str) -> BinaryIO:
        raise NotImplementedError

    @abstractmethod
    def open_write(self, path: str) -> BinaryIO:
        raise NotImplementedError

    @abstractmethod
    def listdir(self, path: str) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def stat(self, path: str) -> FileStat:
        raise NotImplementedError

    @abstractmethod
    def mkdir(self, path: str, parents: bool = False) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, path: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def rmdir(self, path: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError
