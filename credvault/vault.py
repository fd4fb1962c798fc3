import logging
import os
from typing import List, Optional, Tuple

from . import crypto
from . import fileformat
from . import storage
from .errors import InvalidRecordError, LockedError, UnlockError
from .fileformat import FIELD_DELIMITER, Header, Record

logger = logging.getLogger(__name__)

_FORBIDDEN = (FIELD_DELIMITER, "\n", "\r")


def mask_username(s: str) -> str:
    if not s:
        return "**"
    if len(s) <= 2:
        return "*" * len(s)
    return s[0] + "*" * (len(s) - 2) + s[-1]


def _same_service(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def _check_field(name: str, value: str):
    for ch in _FORBIDDEN:
        if ch in value:
            raise InvalidRecordError(f"{name} may not contain {ch!r}.")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidRecordError(f"{name} is not valid text.") from None


class Vault:
    """Encrypted credential store backed by a single file.

    Constructing a Vault either creates the file (header and sentinel only)
    or opens it with ``master``. If the file cannot be unlocked the vault
    stays locked for good: ``is_unlocked`` is False, ``unlock_error`` holds
    the reason and every operation raises LockedError.

    Every mutation rewrites the whole file before returning.
    """

    def __init__(self, path: str, master: crypto.MasterKey,
                 kdf_iters: int = crypto.DEFAULT_KDF_ITERS):
        self.path = path
        self.unlock_error: Optional[UnlockError] = None
        self.skipped_lines = 0
        self._records: Optional[List[Record]] = None
        self._header: Optional[Header] = None
        self._key: Optional[bytes] = None

        if os.path.exists(path):
            self._load(master)
        else:
            self._create(master, kdf_iters)

    @property
    def is_unlocked(self) -> bool:
        return self._records is not None

    def _load(self, master: crypto.MasterKey):
        lines = storage.read_lines(self.path)
        try:
            parsed = fileformat.parse(lines, master)
        except UnlockError as exc:
            logger.warning("Could not unlock %s: %s", self.path, exc)
            self.unlock_error = exc
            return
        self._header = parsed.header
        self._key = parsed.key
        self._records = parsed.records
        self.skipped_lines = parsed.skipped
        logger.info("Unlocked %s (%d records)", self.path, len(parsed.records))

    def _create(self, master: crypto.MasterKey, kdf_iters: int):
        header = Header.new(kdf_iters)
        key = master.derive(header.salt, header.kdf_iters)
        storage.write_lines(self.path, fileformat.serialize([], header, key))
        self._header = header
        self._key = key
        self._records = []
        logger.info("Created new vault at %s", self.path)

    def _ensure_unlocked(self) -> List[Record]:
        if self._records is None:
            raise LockedError()
        return self._records

    def _save(self, records: List[Record]):
        storage.write_lines(self.path, fileformat.serialize(records, self._header, self._key))
        self._records = records

    def __len__(self) -> int:
        return len(self._ensure_unlocked())

    def add(self, service: str, username: str, password: str) -> bool:
        """Store a credential, replacing any record for the same service.

        Returns True when a new record was appended and False when an
        existing one was updated in place.
        """
        records = list(self._ensure_unlocked())
        _check_field("Service", service)
        _check_field("Username", username)
        _check_field("Password", password)

        entry = Record(service, username, password)
        for idx, existing in enumerate(records):
            if _same_service(existing.service, service):
                records[idx] = entry
                created = False
                break
        else:
            records.append(entry)
            created = True

        self._save(records)
        logger.debug("%s record", "Added" if created else "Updated")
        return created

    def list(self) -> List[Tuple[str, str]]:
        return [(r.service, mask_username(r.username)) for r in self._ensure_unlocked()]

    def find(self, term: str) -> List[Record]:
        term = term.casefold()
        return [r for r in self._ensure_unlocked() if term in r.service.casefold()]

    def remove(self, service: str) -> bool:
        records = self._ensure_unlocked()
        kept = [r for r in records if not _same_service(r.service, service)]
        if len(kept) == len(records):
            return False
        self._save(kept)
        logger.debug("Removed %d record(s)", len(records) - len(kept))
        return True
