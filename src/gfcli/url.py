import re
from dataclasses import dataclass
from typing import Optional

from .errors import UrlError


@dataclass(frozen=True)
class StorageUrl:
    """
    A parsed connection target of the form `scheme://host[:port]/volume[/path]`.

    The volume is the first path segment; whatever follows it is the path
    inside the volume. Single-shot commands receive full URLs and use the
    path, while the shell only keeps the connection part.
    """

    scheme: str
    host: str
    volume: str
    port: Optional[int] = None
    path: str = ""

    url_regex = re.compile(
        r"^(?P<scheme>[a-z][a-z0-9+.-]*)://"
        r"(?P<host>[^/:]*)(?::(?P<port>\d+))?"
        r"/(?P<volume>[^/]+)(?P<path>/.*)?$"
    )

    @classmethod
    def parse(cls, text: str) -> "StorageUrl":
        match = cls.url_regex.match(text.strip())
        if not match:
            raise UrlError(
                f"'{text}' is not a valid connection URL "
                "(expected scheme://host[:port]/volume[/path])."
            )
        parts = match.groupdict()
        return cls(
            scheme=parts["scheme"],
            host=parts["host"],
            port=int(parts["port"]) if parts["port"] else None,
            volume=parts["volume"],
            path=parts["path"] or "",
        )

    @property
    def connection_string(self) -> str:
        """The URL without the in-volume path, as shown in the shell prompt."""
        netloc = self.host if self.port is None else f"{self.host}:{self.port}"
        return f"{self.scheme}://{netloc}/{self.volume}"

    def __str__(self) -> str:
        return self.connection_string + self.path
