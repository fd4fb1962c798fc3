"""Shared fixtures for the credvault test suite.

PBKDF2 runs with a low iteration count so each vault opens quickly.
"""

import pytest

from credvault.crypto import MasterKey

FAST_ITERS = 1_000
PASSWORD = "hunter2"


@pytest.fixture
def master():
    return MasterKey(PASSWORD)


@pytest.fixture
def vault_path(tmp_path):
    return str(tmp_path / "vault.dat")


@pytest.fixture
def make_vault(vault_path, master):
    """Open (or create) the test vault, optionally with another password."""
    from credvault.vault import Vault

    def _open(password=None, path=None):
        key = MasterKey(password) if password is not None else master
        return Vault(path or vault_path, key, kdf_iters=FAST_ITERS)

    return _open


@pytest.fixture
def header():
    from credvault.fileformat import Header

    return Header.new(FAST_ITERS)


@pytest.fixture
def key(master, header):
    return master.derive(header.salt, header.kdf_iters)
