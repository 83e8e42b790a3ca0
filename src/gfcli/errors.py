class GfcliError(Exception):
    """Base class for every error the shell reports to the user."""


class OptionError(GfcliError):
    """An unknown flag, a flag missing its value, or an unexpected argument."""


class XlatorOptionError(OptionError):
    """A `-o/--xlator-option` value that is not of the form xlator.key=value."""

    def __init__(self, value: str, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"{value}: {reason}")


class UrlError(GfcliError):
    """A connection target that cannot be parsed."""


class StorageError(GfcliError):
    """A failure reported by a storage backend."""


class UnsupportedSchemeError(StorageError):
    pass


class NotConnectedError(StorageError):
    def __init__(self):
        super().__init__("not connected; use 'connect URL' first")
