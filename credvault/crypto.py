import base64
import binascii

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.backends import default_backend

from .errors import ConfigError, FormatError, IntegrityError

DEFAULT_KDF_ITERS = 200_000
MAX_KDF_ITERS = 10_000_000
SALT_BYTES = 16
BACKEND = default_backend()

# version (1) + timestamp (8) + IV (16) + one AES block (16) + HMAC (32)
_FERNET_VERSION = 0x80
_MIN_TOKEN_BYTES = 73


def derive_key(master_password: str, salt: bytes, kdf_iters: int) -> bytes:
    if not master_password:
        raise ConfigError("Master password must not be empty.")
    if not 1 <= kdf_iters <= MAX_KDF_ITERS:
        raise ConfigError(f"KDF iterations must be between 1 and {MAX_KDF_ITERS}, got {kdf_iters}.")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=kdf_iters,
        backend=BACKEND
    )
    key = kdf.derive(master_password.encode("utf-8"))
    return base64.urlsafe_b64encode(key)


class MasterKey:
    """Master password held for the lifetime of one session.

    The password itself never leaves this object; callers get derived
    Fernet keys through :meth:`derive`.
    """

    def __init__(self, password: str):
        if not password:
            raise ConfigError("Master password must not be empty.")
        self._password = password

    def derive(self, salt: bytes, kdf_iters: int) -> bytes:
        return derive_key(self._password, salt, kdf_iters)

    def __repr__(self) -> str:
        return "MasterKey(<hidden>)"


def _fernet(key: bytes) -> Fernet:
    if not key:
        raise ConfigError("Encryption key must not be empty.")
    try:
        return Fernet(key)
    except (ValueError, TypeError, binascii.Error) as exc:
        raise ConfigError("Encryption key is not a valid derived key.") from exc


def encode(plaintext: str, key: bytes) -> str:
    """Encrypt ``plaintext`` and return it as a printable token."""
    token = _fernet(key).encrypt(plaintext.encode("utf-8"))
    return token.decode("ascii")


def decode(token: str, key: bytes) -> str:
    """Inverse of :func:`encode`.

    Raises FormatError when ``token`` is not a well-formed token and
    IntegrityError when it does not authenticate under ``key``.
    """
    f = _fernet(key)
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
    except (UnicodeEncodeError, binascii.Error, ValueError) as exc:
        raise FormatError("Stored token is not valid base64.") from exc
    if len(raw) < _MIN_TOKEN_BYTES or raw[0] != _FERNET_VERSION:
        raise FormatError("Stored token is not an encrypted line.")
    try:
        data = f.decrypt(token.encode("ascii"))
    except InvalidToken as exc:
        raise IntegrityError("Stored token failed authentication.") from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError("Decrypted line is not valid UTF-8.") from exc
