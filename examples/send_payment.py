"""
Minimal script that uses the public API to run one interactive payment.

The script starts the flow, prints the URL the sender has to open, then asks
for the ``interact_ref`` found on the return URL and finishes the payment.
"""

from __future__ import annotations

import argparse
import logging
import sys

from interledger_payments import (
    ConfigError,
    FlowStateError,
    InterledgerClientError,
    PaymentFlow,
    create_interledger_client,
    load_client_config,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send an Open Payments payment using the SDK API")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to the .env file containing ILP_* settings",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    parser.add_argument("--sender", required=True, help="Wallet address that pays")
    parser.add_argument("--receiver", required=True, help="Wallet address that gets paid")
    parser.add_argument("--amount", required=True, help="Amount in the receiver's asset (e.g. 12.50)")
    parser.add_argument(
        "--return-url",
        default="http://localhost:3000/callback",
        help="Where the auth server sends the sender after approving",
    )
    parser.add_argument(
        "--key-id",
        help="Override the key id without relying on environment data",
    )
    parser.add_argument(
        "--private-key-file",
        help="Path to the Ed25519 PEM key registered for the client wallet",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    try:
        config = load_client_config(
            env_file=args.env_file,
            key_id=args.key_id,
            private_key_file=args.private_key_file,
        )
    except ConfigError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 1

    flow = PaymentFlow(create_interledger_client(config=config))

    try:
        pending = flow.start(args.sender, args.receiver, args.amount, args.return_url)
        print(f"Approve the payment at:\n  {pending.redirect_uri}")
        interact_ref = input("interact_ref from the return URL: ").strip()
        result = flow.finish(pending, interact_ref)
    except FlowStateError as exc:
        logging.error("Payment did not go through (%s): %s", exc.state, exc)
        return 1
    except InterledgerClientError as exc:
        logging.error("Payment flow failed: %s", exc)
        return 1

    logging.info(
        "Outgoing payment %s finished with state %s", result.payment.id, result.state.value
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
