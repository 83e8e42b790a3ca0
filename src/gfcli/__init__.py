"""
gfcli: an interactive shell, and a family of single-shot commands
(gfcat, gfcp, gfls, ...), for working with files on a remote volume.
"""

from .cli import main
from .config import PACKAGE_VERSION

__all__ = ["main"]
__version__ = PACKAGE_VERSION
