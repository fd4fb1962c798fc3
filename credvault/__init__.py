from .crypto import MasterKey
from .errors import (
    ConfigError,
    EngineError,
    FormatError,
    IntegrityError,
    InvalidFormatError,
    InvalidRecordError,
    LockedError,
    StorageError,
    UnlockError,
    VaultError,
    WrongPasswordError,
)
from .fileformat import Record
from .vault import Vault, mask_username

__version__ = "0.1.0"
