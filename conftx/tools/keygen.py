"""
ConfTx Key Generation Tool

    conftx-setup init-config --testnet -o conftx.json
    conftx-setup setup --config conftx.json
    conftx-setup account --name alice -o alice.json
"""

from __future__ import annotations
import argparse
import getpass
import logging
import os
import sys
import time

from conftx.errors import ConfTxError
from conftx.keys import KeyFile, KeyPair
from conftx.node.config import ProtocolConfig, setup_logging
from conftx.transfer.proving import setup

logger = logging.getLogger(__name__)


def _load_config(args: argparse.Namespace) -> ProtocolConfig:
    if args.config:
        config = ProtocolConfig.load(args.config)
    elif args.testnet:
        config = ProtocolConfig.default_testnet()
    else:
        config = ProtocolConfig.default_mainnet()

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"  config error: {error}", file=sys.stderr)
        sys.exit(2)
    return config


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def cmd_init_config(args: argparse.Namespace) -> int:
    config = ProtocolConfig.default_testnet() if args.testnet else ProtocolConfig.default_mainnet()
    config.save(args.output)
    print(f"  Wrote {config.name} configuration to {args.output}")
    return 0


def cmd_setup(args: argparse.Namespace) -> int:
    config = _load_config(args)
    setup_logging(config.log)

    params = config.circuit.params()
    max_degree = args.max_degree or config.setup.max_degree

    start = time.time()
    proving_key, verifying_key = setup(params, max_degree)
    elapsed = time.time() - start

    _ensure_parent(config.setup.proving_key_path)
    _ensure_parent(config.setup.verifying_key_path)
    proving_key.save(config.setup.proving_key_path)
    verifying_key.save(config.setup.verifying_key_path)

    print(f"  Setup finished in {elapsed:.1f}s (domain {proving_key.domain_size})")
    print(f"  proving key:   {config.setup.proving_key_path}")
    print(f"  verifying key: {config.setup.verifying_key_path}")
    print(f"  circuit:       {verifying_key.circuit_digest.hex()}")
    return 0


def cmd_account(args: argparse.Namespace) -> int:
    config = _load_config(args)
    scalar_bits = config.circuit.scalar_bits

    password = getpass.getpass("Password: ").encode()
    if password != getpass.getpass("Repeat password: ").encode():
        print("  Passwords do not match", file=sys.stderr)
        return 1

    keypair = KeyPair.generate(scalar_bits)
    keyfile = KeyFile.create(args.name, keypair, password, scalar_bits=scalar_bits)
    _ensure_parent(args.output)
    keyfile.save(args.output)

    print(f"  Account {args.name}: {keypair.public.hex()}")
    print(f"  Keyfile written to {args.output}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="ConfTx - key generation for confidential transfers"
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Protocol configuration file (JSON)"
    )
    parser.add_argument(
        "--testnet",
        action="store_true",
        help="Use testnet defaults when no config file is given"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-config", help="Write a default configuration")
    init_parser.add_argument("--output", "-o", type=str, default="conftx.json")
    init_parser.set_defaults(func=cmd_init_config)

    setup_parser = subparsers.add_parser("setup", help="Generate transfer proving and verifying keys")
    setup_parser.add_argument(
        "--max-degree",
        type=int,
        default=None,
        help="Override the configured maximum domain size"
    )
    setup_parser.set_defaults(func=cmd_setup)

    account_parser = subparsers.add_parser("account", help="Create a password-protected account keyfile")
    account_parser.add_argument("--name", "-n", type=str, required=True)
    account_parser.add_argument("--output", "-o", type=str, required=True)
    account_parser.set_defaults(func=cmd_account)

    args = parser.parse_args()

    try:
        sys.exit(args.func(args))
    except ConfTxError as e:
        logger.error(f"{e.code.name}: {e.message}")
        print(f"  Error: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
