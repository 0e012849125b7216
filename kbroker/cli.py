"""Command line tool for the broker's administrative API."""

from __future__ import annotations

import argparse
import base64
import logging
import sys
from pathlib import Path

from . import client

DEFAULT_URL = "http://127.0.0.1:8080"

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kbs-client",
        description="A command line client tool for KBS APIs.",
    )
    parser.add_argument("--url", default=DEFAULT_URL, help="The KBS server root URL.")
    parser.add_argument(
        "--cert-file",
        type=Path,
        help="The KBS HTTPS server custom root certificate file path (PEM format).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    config = commands.add_parser("config", help="Set and configure KBS.")
    config.add_argument(
        "--auth-private-key",
        type=Path,
        required=True,
        help="PEM file of the Ed25519 private key used to sign administrative tokens.",
    )
    config_commands = config.add_subparsers(dest="config_command", required=True)

    attestation = config_commands.add_parser(
        "set-attestation-policy", help="Set attestation verification policy."
    )
    attestation.add_argument("--type", dest="policy_type", help='Policy format type, e.g. "rego".')
    attestation.add_argument("--id", dest="policy_id", help='Policy ID, e.g. "default".')
    attestation.add_argument("--policy-file", type=Path, required=True, help="Policy file path.")

    resource_policy = config_commands.add_parser("set-resource-policy", help="Set resource policy.")
    resource_policy.add_argument("--policy-file", type=Path, required=True, help="Policy file path.")

    resource = config_commands.add_parser("set-resource", help="Set confidential resource.")
    resource.add_argument(
        "--path", required=True, help="KBS resource path, e.g. my_repo/resource_type/123abc."
    )
    resource.add_argument("--resource-file", type=Path, required=True, help="Resource file path.")
    return parser


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _run_config(args: argparse.Namespace, kbs_certs: list[str]) -> None:
    auth_key = args.auth_private_key.read_text()
    if args.config_command == "set-attestation-policy":
        policy_bytes = args.policy_file.read_bytes()
        client.set_attestation_policy(
            args.url, auth_key, policy_bytes, args.policy_type, args.policy_id, kbs_certs
        )
        print(f"Set attestation policy success \n policy: {_b64(policy_bytes)}")
    elif args.config_command == "set-resource-policy":
        policy_bytes = args.policy_file.read_bytes()
        client.set_resource_policy(args.url, auth_key, policy_bytes, kbs_certs)
        print(f"Set resource policy success \n policy: {_b64(policy_bytes)}")
    else:
        resource_bytes = args.resource_file.read_bytes()
        client.set_resource(args.url, auth_key, resource_bytes, args.path, kbs_certs)
        print(f"Set resource success \n resource: {_b64(resource_bytes)}")


def main(argv: list[str] | None = None) -> int:
    """Run the command line tool and return its exit status."""
    logging.basicConfig(level=logging.INFO)
    args = _build_parser().parse_args(argv)
    try:
        kbs_certs = [args.cert_file.read_text()] if args.cert_file is not None else []
        _run_config(args, kbs_certs)
    except Exception as exc:  # noqa: BLE001 - reported to the user as the exit status
        logger.debug("command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())