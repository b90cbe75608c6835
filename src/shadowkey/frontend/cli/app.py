"""ShadowKey command line: create, list, check and remove encrypted keys.

Usage::

    shadowkey [--keys-dir DIR] [--light] [-v] new
    shadowkey list
    shadowkey show ADDRESS
    shadowkey delete ADDRESS
    shadowkey cleanup ADDRESS

The passphrase is taken from ``SHADOWKEY_PASSPHRASE`` or prompted for.
Private key bytes are never printed.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from shadowkey.core.exceptions import ShadowKeyError
from shadowkey.core.models import address_from_hex, address_to_hex
from shadowkey.security.kdf import KDFProfile
from .context import AppContext, build_context, read_passphrase
from .logging_config import configure_logging


logger = logging.getLogger(__name__)


def _address_arg(value: str) -> bytes:
    try:
        return address_from_hex(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid address {value!r}: {e}")


def cmd_new(ctx: AppContext, args) -> int:
    passphrase = read_passphrase(confirm=True)
    key = ctx.store.generate_new_key(passphrase)
    print(f"0x{key.address_hex}")
    return 0


def cmd_list(ctx: AppContext, args) -> int:
    for address in sorted(ctx.store.get_key_addresses()):
        print(f"0x{address_to_hex(address)}")
    return 0


def cmd_show(ctx: AppContext, args) -> int:
    key = ctx.store.get_key(args.address, read_passphrase())
    print(f"address: 0x{key.address_hex}")
    print(f"id:      {key.id}")
    print(f"file:    {ctx.storage.path_for(key.address)}")
    return 0


def cmd_delete(ctx: AppContext, args) -> int:
    ctx.store.delete_key(args.address, read_passphrase())
    print(f"deleted 0x{address_to_hex(args.address)}")
    return 0


def cmd_cleanup(ctx: AppContext, args) -> int:
    ctx.store.cleanup(args.address)
    print(f"removed 0x{address_to_hex(args.address)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shadowkey", description="Passphrase-encrypted key store")
    parser.add_argument("--keys-dir", default=None, help="key directory (default: $SHADOWKEY_HOME or ~/.shadowkey/keystore)")
    parser.add_argument("--light", action="store_true", help="use the light scrypt profile for new keys")
    parser.add_argument("-v", "--verbose", action="count", default=0)

    sub = parser.add_subparsers(dest="command", required=True)

    p_new = sub.add_parser("new", help="generate and store a new key")
    p_new.set_defaults(func=cmd_new)

    p_list = sub.add_parser("list", help="list stored key addresses")
    p_list.set_defaults(func=cmd_list)

    p_show = sub.add_parser("show", help="decrypt a key and print its address and id")
    p_show.add_argument("address", type=_address_arg)
    p_show.set_defaults(func=cmd_show)

    p_delete = sub.add_parser("delete", help="delete a key after checking the passphrase")
    p_delete.add_argument("address", type=_address_arg)
    p_delete.set_defaults(func=cmd_delete)

    p_cleanup = sub.add_parser("cleanup", help="remove a key file without a passphrase check")
    p_cleanup.add_argument("address", type=_address_arg)
    p_cleanup.set_defaults(func=cmd_cleanup)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        ctx = build_context(
            keys_dir=args.keys_dir,
            profile=KDFProfile.LIGHT if args.light else None,
        )
    except ShadowKeyError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    level = ctx.config.log_level
    if args.verbose:
        level = logging.DEBUG if args.verbose > 1 else logging.INFO
    configure_logging(level)

    try:
        return args.func(ctx, args)
    except (ShadowKeyError, ValueError) as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
