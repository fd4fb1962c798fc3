import logging
import os
import tempfile
from typing import Iterable, List

from .errors import StorageError

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


def ensure_dir_for(path: str):
    d = os.path.dirname(os.path.abspath(path))
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def read_lines(path: str) -> List[str]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return [line.rstrip("\n") for line in fh]
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"Cannot read vault file {path}: {exc}") from exc


def write_lines(path: str, lines: Iterable[str]) -> None:
    """Replace ``path`` with ``lines``, or leave it untouched on failure.

    The new content goes to a temporary file in the same directory which is
    then renamed over the target.
    """
    try:
        ensure_dir_for(path)
        fd, tmp_path = tempfile.mkstemp(
            dir=os.path.dirname(os.path.abspath(path)), prefix=".vault-", suffix=".tmp"
        )
    except OSError as exc:
        raise StorageError(f"Cannot write vault file {path}: {exc}") from exc

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as tmp:
            for line in lines:
                tmp.write(line + "\n")
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise StorageError(f"Cannot write vault file {path}: {exc}") from exc
    finally:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                logger.warning("Could not remove temporary file %s", tmp_path)
    logger.debug("Wrote %s", path)
