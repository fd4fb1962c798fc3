import os

DEFAULT_VAULT = "vault.dat"


def resolve_vault_path(cli_path: str | None) -> str:
    if cli_path: return cli_path
    env = os.getenv("CREDVAULT_PATH")
    return env if env else DEFAULT_VAULT
