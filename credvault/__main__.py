import sys

from .cli import build_parser, configure_logging, open_vault, run_loop
from .errors import ConfigError, StorageError

"""
credvault — a local, password-protected credential store.

A single encrypted file holds (service, username, password) records and is
unlocked with a master password at the start of each session.

Usage:
    python -m credvault
    python -m credvault --vault ./vault.dat
    CREDVAULT_PATH=~/secrets/vault.dat python -m credvault
"""

def main():
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(args.verbose)
    try:
        vault = open_vault(args)
        run_loop(vault)
    except (ConfigError, StorageError) as exc:
        raise SystemExit(str(exc))
    except (KeyboardInterrupt, EOFError):
        print("\nAborted by user.")
        sys.exit(1)

if __name__ == "__main__":
    main()
