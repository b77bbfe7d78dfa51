"""Operator CLI for the Keycloak users managed by backend-resources.

This module is a thin wrapper around backend_resources.core:
    python scripts/users.py create --username alice --email alice@example.com \
        --password s3cret --first Alice --last Smith
    python scripts/users.py get --id 60208bfd-25c0-49c6-8139-8059d997eeda
    python scripts/users.py delete --username alice
"""
from __future__ import annotations
import argparse
import json
import os
import sys
from uuid import UUID

from backend_resources.core import ApplicationError, UserRequest, UserService, ValidationError
from backend_resources.core.keycloak import KeycloakAPIError, KeycloakClient, KeycloakUserAdmin


def build_admin(args: argparse.Namespace) -> KeycloakUserAdmin:
    """Keycloak user admin authenticated with the service account from the CLI arguments."""
    client = KeycloakClient(args.kc_url)
    client.use_service_account(args.auth_realm, args.svc_client_id, args.svc_client_secret)
    return KeycloakUserAdmin(client, args.realm)


def _resolve_id(admin: KeycloakUserAdmin, args: argparse.Namespace) -> str | None:
    if args.id:
        return str(UUID(args.id))
    return admin.find_id_by_username(args.username)


def _add_target(parser: argparse.ArgumentParser) -> None:
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--id")
    target.add_argument("--username")


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    realm_default = os.environ.get("KEYCLOAK_REALM", "ITM")
    parser = argparse.ArgumentParser(description="backend-resources user helper")
    parser.add_argument("--kc-url", default=os.environ.get("KEYCLOAK_URL", "http://localhost:8080"))
    parser.add_argument("--realm", default=realm_default)
    parser.add_argument("--auth-realm", default=os.environ.get("KEYCLOAK_SERVICE_REALM", realm_default))
    parser.add_argument("--svc-client-id", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "backend-resources"))
    parser.add_argument("--svc-client-secret", default=os.environ.get("KEYCLOAK_SERVICE_CLIENT_SECRET"))

    sub = parser.add_subparsers(dest="cmd")

    sc = sub.add_parser("create")
    sc.add_argument("--username", required=True)
    sc.add_argument("--email", required=True)
    sc.add_argument("--password", required=True)
    sc.add_argument("--first", required=True)
    sc.add_argument("--last", required=True)

    _add_target(sub.add_parser("get"))
    _add_target(sub.add_parser("delete"))

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 2

    if not args.svc_client_secret:
        parser.error("Missing service account secret")

    admin = build_admin(args)

    try:
        if args.cmd == "create":
            request = UserRequest.from_payload({
                "username": args.username,
                "email": args.email,
                "password": args.password,
                "firstName": args.first,
                "lastName": args.last,
            })
            UserService(admin).create_user(request)
            print(f"[create] User '{args.username}' created in realm '{args.realm}'", file=sys.stderr)
            return 0

        user_id = _resolve_id(admin, args)
        if not user_id:
            print(f"[{args.cmd}] User '{args.username}' not found", file=sys.stderr)
            return 1

        if args.cmd == "get":
            user = UserService(admin).get_user_by_id(UUID(user_id))
            print(json.dumps({"id": user_id, **user.to_dict()}, indent=2))
        elif args.cmd == "delete":
            admin.delete(user_id)
            print(f"[delete] User {user_id} deleted from realm '{args.realm}'", file=sys.stderr)
        return 0
    except ValidationError as e:
        for field, message in e.errors.items():
            print(f"[{args.cmd}] {field}: {message}", file=sys.stderr)
        return 1
    except ApplicationError as e:
        print(f"[{args.cmd}] Error [{e.http_status}]: {e.message}", file=sys.stderr)
        return 1
    except KeycloakAPIError as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"[{args.cmd}] Invalid id: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
