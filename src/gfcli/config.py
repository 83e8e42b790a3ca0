import os
from pathlib import Path

# --- Centralized Path Constants ---
GFCLI_HOME = Path(os.getenv("GFCLI_HOME", Path.home() / ".gfcli"))
HISTORY_FILE = Path(os.getenv("GFCLI_HISTORY", GFCLI_HOME / "history"))

# Base directory the local `file://` backend resolves volume names under.
LOCAL_ROOT = Path(os.getenv("GFCLI_LOCAL_ROOT", "/"))

# --- Identity ---
TOOL_NAME = "gfcli"
PACKAGE_NAME = "glusterfs-coreutils"
PACKAGE_VERSION = "0.1.0"
COPYRIGHT = "Copyright (C) 2015 Facebook Inc."
LICENSE = "License GPLv3+: GNU GPL version 3 or later <http://gnu.org/licenses/gpl.html>."
AUTHORS = "Written by Craig Cabrey."
