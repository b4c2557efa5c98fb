"""PayPal Checkout operator CLI.

Checks PayPal credentials without starting the application.

Usage:
    python src/manage.py verify-credentials --client-id ID --secret SECRET [--mode live]
    python src/manage.py client-token --client-id ID --secret SECRET
"""

import argparse
import os
import sys


def _sdk(args):
    from checkout.gateway.sdk import PayPalCheckoutSdk

    return PayPalCheckoutSdk(client_id=args.client_id, secret=args.secret, mode=args.mode, timeout=args.timeout)


def verify_credentials(args) -> int:
    """Fetch an access token with the given credentials."""
    from checkout.exceptions import RemoteCallError

    sdk = _sdk(args)
    try:
        token = sdk.get_access_token()
    except RemoteCallError as exc:
        print(f"Invalid client_id or secret specified (HTTP {exc.status_code}).")
        return 1
    finally:
        sdk.close()

    print(f"Credentials accepted by {sdk.base_url}; token expires in {token.get('expires_in')}s.")
    return 0


def client_token(args) -> int:
    """Fetch a Hosted Fields client token."""
    from checkout.exceptions import RemoteCallError

    sdk = _sdk(args)
    try:
        token = sdk.get_client_token()
    except RemoteCallError as exc:
        print(f"Could not fetch a client token (HTTP {exc.status_code}): {exc.body}")
        return 1
    finally:
        sdk.close()

    print(token["client_token"])
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="PayPal Checkout management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("verify-credentials", "Check a client id / secret pair against PayPal"),
        ("client-token", "Print a Hosted Fields client token"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument("--client-id", default=os.environ.get("PAYPAL_CLIENT_ID"))
        command_parser.add_argument("--secret", default=os.environ.get("PAYPAL_SECRET"))
        command_parser.add_argument(
            "--mode",
            choices=["live", "test"],
            default=os.environ.get("PAYPAL_MODE", "test"),
        )
        command_parser.add_argument("--timeout", type=float, default=None)

    args = parser.parse_args(argv)
    if not args.client_id or not args.secret:
        parser.error("--client-id and --secret are required (or set PAYPAL_CLIENT_ID / PAYPAL_SECRET)")

    if args.command == "verify-credentials":
        return verify_credentials(args)
    if args.command == "client-token":
        return client_token(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
