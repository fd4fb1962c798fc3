import argparse
import logging
from getpass import getpass

from . import crypto
from . import utils
from .errors import InvalidRecordError
from .vault import Vault

PROMPT = "\nCommand (add/list/find/remove/exit): "


def cmd_add(vault, read, read_secret, write):
    service = read("Service: ")
    username = read("Username: ")
    secret = read_secret("Password: ")
    try:
        vault.add(service, username, secret)
    except InvalidRecordError as exc:
        write(str(exc))
        return
    write("Saved.")


def cmd_list(vault, read, read_secret, write):
    for service, masked in vault.list():
        write(f"{service}: {masked}")


def cmd_find(vault, read, read_secret, write):
    term = read("Search term: ")
    for service, username, secret in vault.find(term):
        write(f"{service} -> {username} / {secret}")


def cmd_remove(vault, read, read_secret, write):
    service = read("Service to remove: ")
    write("Removed." if vault.remove(service) else "Not found.")


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "find": cmd_find,
    "remove": cmd_remove,
}


def run_loop(vault: Vault, read=input, read_secret=getpass, write=print):
    """Read commands until exit/quit or end of input."""
    while True:
        try:
            cmd = read(PROMPT).strip().lower()
        except EOFError:
            write("")
            return
        if cmd in ("exit", "quit"):
            return
        handler = COMMANDS.get(cmd)
        if handler is None:
            write("Unknown command.")
            continue
        try:
            handler(vault, read, read_secret, write)
        except EOFError:
            write("")
            return


def open_vault(args) -> Vault:
    vault_path = utils.resolve_vault_path(args.vault)
    master = crypto.MasterKey(getpass("Enter master password: "))
    vault = Vault(vault_path, master, kdf_iters=args.kdf_iters or crypto.DEFAULT_KDF_ITERS)
    if not vault.is_unlocked:
        raise SystemExit(str(vault.unlock_error))
    if vault.skipped_lines:
        print(f"Warning: {vault.skipped_lines} unreadable record line(s) were skipped.")
    return vault


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Encrypted single-file credential store")
    parser.add_argument("--vault", help=f"Path to vault file (or set CREDVAULT_PATH). Default: {utils.DEFAULT_VAULT}")
    parser.add_argument("--kdf-iters", type=int,
                        help=f"PBKDF2 iterations for a new vault (default {crypto.DEFAULT_KDF_ITERS})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
