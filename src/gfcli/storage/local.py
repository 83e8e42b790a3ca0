import os
from pathlib import Path
from typing import BinaryIO, Dict, List, TYPE_CHECKING

import structlog

from .. import config
from ..errors import StorageError
from .base import FileStat, StorageConnection

if TYPE_CHECKING:
    from ..session import XlatorOption
    from ..url import StorageUrl

logger = structlog.get_logger(__name__)


class LocalStorageConnection(StorageConnection):
    """
    Serves a directory on the local machine as a volume.

    `file://host/volume` maps to `$GFCLI_LOCAL_ROOT/volume`; the host part is
    ignored. There are no translators, so xlator options are only recorded.
    """

    scheme = "file"

    def __init__(self, url: "StorageUrl"):
        super().__init__(url)
        self.root = (Path(config.LOCAL_ROOT) / url.volume).resolve()
        self.xlator_options: Dict[str, str] = {}
        self._closed = False
        if not self.root.is_dir():
            raise StorageError(f"volume '{url.volume}' not found at {self.root}")
        logger.info("Local volume opened.", root=str(self.root))

    def _resolve(self, path: str) -> Path:
        if self._closed:
            raise StorageError("connection is closed")
        target = (self.root / path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageError(f"{path}: path escapes the volume")
        return target

    def apply_xlator_option(self, option: "XlatorOption") -> None:
        self.xlator_options[option.key] = option.value
        logger.debug("Recorded translator option.", key=option.key, value=option.value)

    def open_read(self, path: str) -> BinaryIO:
        target = self._resolve(path)
        try:
            return open(target, "rb")
        except OSError as e:
            raise StorageError(f"{path}: {e.strerror}") from e

    def open_write(self, path: str) -> BinaryIO:
        target = self._resolve(path)
        try:
            return open(target, "wb")
        except OSError as e:
            raise StorageError(f"{path}: {e.strerror}") from e

    def listdir(self, path: str) -> List[str]:
        target = self._resolve(path)
        try:
            return sorted(os.listdir(target))
        except OSError as e:
            raise StorageError(f"{path}: {e.strerror}") from e

    def stat(self, path: str) -> FileStat:
        target = self._resolve(path)
        try:
            st = target.stat()
        except OSError as e:
            raise StorageError(f"{path}: {e.strerror}") from e
        return FileStat(
            path=path,
            size=st.st_size,
            mode=st.st_mode,
            mtime=st.st_mtime,
            is_dir=target.is_dir(),
            nlink=st.st_nlink,
            uid=st.st_uid,
            gid=st.st_gid,
        )

    def mkdir(self, path: str, parents: bool = False) -> None:
        target = self._resolve(path)
        try:
            target.mkdir(parents=parents, exist_ok=parents)
        except OSError as e:
            raise StorageError(f"{path}: {e.strerror}") from e

    def remove(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink()
        except OSError as e:
            raise StorageError(f"{path}: {e.strerror}") from e

    def rmdir(self, path: str) -> None:
        target = self._resolve(path)
        if target == self.root:
            raise StorageError(f"{path}: refusing to remove the volume root")
        try:
            target.rmdir()
        except OSError as e:
            raise StorageError(f"{path}: {e.strerror}") from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        logger.info("Local volume closed.", root=str(self.root))
