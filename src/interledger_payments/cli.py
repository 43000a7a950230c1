"""
Command-line interface for running Open Payments third-party payments.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence, Tuple

import requests

from .api import ConfigError, create_interledger_client, load_client_config
from .core.client import InterledgerClient
from .core.errors import FlowStateError, InterledgerClientError, RemoteError
from .core.flow import PaymentFlow, PendingAuthorization
from .core.states import FlowState

DEFAULT_STATE_FILE = "pending-payment.json"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _env_override(value: str) -> Tuple[str, str]:
    if "=" not in value:
        raise argparse.ArgumentTypeError("Overrides must look like KEY=VALUE")
    key, val = value.split("=", 1)
    key = key.strip()
    if not key:
        raise argparse.ArgumentTypeError("Override key must not be empty")
    return key, val


def _collect_overrides(pairs: Iterable[Tuple[str, str]]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, value in pairs:
        overrides[key] = value
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="interledger-payments",
        description="Run an Open Payments third-party payment between two wallets",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing ILP_* settings (default: .env)",
    )
    parser.add_argument(
        "--set",
        action="append",
        type=_env_override,
        metavar="KEY=VALUE",
        default=None,
        help="Override an environment variable without editing the .env file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    wallet = commands.add_parser("wallet", help="Resolve a wallet address and print its metadata")
    wallet.add_argument("address", help="Wallet address URL or $payment-pointer")

    start = commands.add_parser(
        "start", help="Create the incoming payment and quote, then request the interactive grant"
    )
    start.add_argument("--sender", required=True, help="Wallet address that pays")
    start.add_argument("--receiver", required=True, help="Wallet address that gets paid")
    start.add_argument("--amount", required=True, help="Amount in the receiver's asset, e.g. 12.50")
    start.add_argument(
        "--return-url", required=True, help="URL the auth server redirects to after the interaction"
    )
    start.add_argument(
        "--state-file",
        default=DEFAULT_STATE_FILE,
        help=f"Where to store the pending authorization (default: {DEFAULT_STATE_FILE})",
    )

    finish = commands.add_parser(
        "finish", help="Resume a pending payment with the interact_ref from the redirect"
    )
    finish.add_argument("--interact-ref", required=True, help="interact_ref query parameter")
    finish.add_argument(
        "--state-file",
        default=DEFAULT_STATE_FILE,
        help=f"Pending authorization written by 'start' (default: {DEFAULT_STATE_FILE})",
    )
    finish.add_argument(
        "--attempts",
        type=int,
        default=10,
        help="How many times to check the incoming payment (default: 10)",
    )
    finish.add_argument(
        "--interval",
        type=float,
        default=2.0,
        help="Seconds between incoming payment checks (default: 2)",
    )
    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)
    overrides = _collect_overrides(args.set or ())

    try:
        config = load_client_config(env_file=args.env_file, overrides=overrides)
    except (ConfigError, ValueError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    client = create_interledger_client(config=config, session=requests.Session())

    try:
        if args.command == "wallet":
            return _wallet(client, args)
        if args.command == "start":
            return _start(client, args)
        return _finish(client, args)
    except RemoteError as exc:
        logging.error("Request rejected %s", exc.description)
        return 1
    except FlowStateError as exc:
        state = exc.state.value if exc.state is not None else "aborted"
        logging.error("Payment %s: %s", state, exc)
        return 1
    except (InterledgerClientError, ValueError, OSError) as exc:
        logging.error("Payment flow failed: %s", exc)
        return 1


def _wallet(client: InterledgerClient, args: argparse.Namespace) -> int:
    pointer = client.get_wallet(args.address)
    print(client.codec.encode_text(pointer))
    return 0


def _start(client: InterledgerClient, args: argparse.Namespace) -> int:
    pending = PaymentFlow(client).start(args.sender, args.receiver, args.amount, args.return_url)
    Path(args.state_file).write_text(pending.to_json(client.codec), encoding="utf-8")
    logging.info("Pending authorization written to %s", args.state_file)
    print(pending.redirect_uri)
    return 0


def _finish(client: InterledgerClient, args: argparse.Namespace) -> int:
    content = Path(args.state_file).read_text(encoding="utf-8")
    pending = PendingAuthorization.from_json(content, client.codec)
    result = PaymentFlow(client).finish(
        pending, args.interact_ref, attempts=args.attempts, interval=args.interval
    )
    if result.state is FlowState.COMPLETED:
        logging.info("Incoming payment %s completed", result.incoming_payment.id)
    else:
        logging.warning(
            "Outgoing payment %s sent but incoming payment %s is not completed yet",
            result.payment.id,
            result.incoming_payment.id,
        )
    print(result.state.value)
    return 0


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
