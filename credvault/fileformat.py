"""On-disk layout of a vault file.

A vault is UTF-8 text, one item per line::

    VAULTv2$<kdf iterations>$<base64 salt>
    <encoded sentinel>
    <encoded service|username|password>
    ...

The header is stored in clear so the key can be derived; every other line
is a token produced by :func:`credvault.crypto.encode`. The sentinel line
is the only password check: if it does not decode to ``SENTINEL_PLAINTEXT``
the master password is wrong.
"""
import base64
import binascii
import logging
import os
from typing import List, NamedTuple, Optional, Sequence

from . import crypto
from .errors import FormatError, IntegrityError, InvalidFormatError, WrongPasswordError

logger = logging.getLogger(__name__)

HEADER_TAG = "VAULTv2"
HEADER_SEPARATOR = "$"
SENTINEL_PLAINTEXT = "CHECK|OK"
FIELD_DELIMITER = "|"


class Record(NamedTuple):
    service: str
    username: str
    password: str


class Header(NamedTuple):
    kdf_iters: int
    salt: bytes

    @classmethod
    def new(cls, kdf_iters: int = crypto.DEFAULT_KDF_ITERS) -> "Header":
        return cls(kdf_iters, os.urandom(crypto.SALT_BYTES))

    @classmethod
    def parse(cls, line: str) -> "Header":
        parts = line.split(HEADER_SEPARATOR)
        if len(parts) != 3 or parts[0] != HEADER_TAG:
            raise InvalidFormatError()
        iters_raw, salt_raw = parts[1], parts[2]
        if not (iters_raw.isascii() and iters_raw.isdigit()) or len(iters_raw) > 12:
            raise InvalidFormatError()
        if not 1 <= int(iters_raw) <= crypto.MAX_KDF_ITERS:
            raise InvalidFormatError()
        try:
            salt = base64.b64decode(salt_raw, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidFormatError() from None
        if not salt:
            raise InvalidFormatError()
        return cls(int(iters_raw), salt)

    def render(self) -> str:
        salt = base64.b64encode(self.salt).decode("ascii")
        return HEADER_SEPARATOR.join((HEADER_TAG, str(self.kdf_iters), salt))


class ParsedVault(NamedTuple):
    header: Header
    key: bytes
    records: List[Record]
    skipped: int


def _sentinel_matches(line: str, key: bytes) -> bool:
    try:
        return crypto.decode(line.strip(), key) == SENTINEL_PLAINTEXT
    except (FormatError, IntegrityError):
        return False


def _decode_record(line: str, key: bytes) -> Optional[Record]:
    try:
        plain = crypto.decode(line.strip(), key)
    except (FormatError, IntegrityError):
        return None
    parts = plain.split(FIELD_DELIMITER)
    if len(parts) != 3:
        return None
    return Record(*parts)


def parse(raw_lines: Sequence[str], master: crypto.MasterKey) -> ParsedVault:
    """Decode the lines of a vault file.

    Raises InvalidFormatError when the header is missing or unknown and
    WrongPasswordError when the sentinel is missing or does not decode.
    Blank record lines are ignored; record lines that cannot be decoded or
    do not hold exactly three fields are skipped and counted.
    """
    if not raw_lines:
        raise InvalidFormatError()
    header = Header.parse(raw_lines[0])
    key = master.derive(header.salt, header.kdf_iters)

    if len(raw_lines) < 2 or not _sentinel_matches(raw_lines[1], key):
        raise WrongPasswordError()

    records = []
    skipped = 0
    for lineno, line in enumerate(raw_lines[2:], start=3):
        if not line.strip():
            continue
        record = _decode_record(line, key)
        if record is None:
            skipped += 1
            logger.warning("Skipping unreadable record on line %d", lineno)
            continue
        records.append(record)
    return ParsedVault(header, key, records, skipped)


def serialize(records: Sequence[Record], header: Header, key: bytes) -> List[str]:
    lines = [header.render(), crypto.encode(SENTINEL_PLAINTEXT, key)]
    for record in records:
        lines.append(crypto.encode(FIELD_DELIMITER.join(record), key))
    return lines
