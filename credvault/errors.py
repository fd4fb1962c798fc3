class VaultError(Exception):
    """Base class for every error raised by credvault."""


class ConfigError(VaultError):
    pass


class FormatError(VaultError):
    """A stored token is not a well-formed encoded line."""


class IntegrityError(VaultError):
    """A stored token failed authentication under the supplied key."""


class UnlockError(VaultError):
    message = "Unable to unlock vault."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class InvalidFormatError(UnlockError):
    message = "Invalid vault file."


class WrongPasswordError(UnlockError):
    message = "Access denied. Wrong master password."


class EngineError(VaultError):
    pass


class LockedError(EngineError):
    def __init__(self, message: str = "Vault is locked."):
        super().__init__(message)


class StorageError(VaultError):
    pass


class InvalidRecordError(VaultError, ValueError):
    pass
