from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

from matchday.application.container import Services, open_services
from matchday.application.services.admin_credentials import Principal
from matchday.domain.errors import ServiceError
from matchday.logging_config import get_logger

_OPERATIONS = {
    "set-pin": "setPin",
    "verify-pin": "verifyPin",
    "reset-pin": "resetPin",
    "clear-admin": "clearAdmin",
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Manage the league admin PIN and admin sessions")
    p.add_argument("--league", default="default", help="League id (default: default)")
    p.add_argument("--uid", required=True, help="Id of the signed-in caller")
    p.add_argument("--token", help="Admin claim from an earlier set-pin/verify-pin")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("set-pin", help="Set the league PIN (only once)").add_argument("pin")
    sub.add_parser("verify-pin", help="Prove the PIN and receive an admin claim").add_argument("pin")
    sub.add_parser("reset-pin", help="Rotate the PIN (admin claim required)").add_argument("new_pin")
    sub.add_parser("clear-admin", help="Drop the caller's admin sessions")
    return p


def _request(args: argparse.Namespace) -> dict[str, Any]:
    body: dict[str, Any] = {"leagueId": args.league}
    if args.command in ("set-pin", "verify-pin"):
        body["pin"] = args.pin
    elif args.command == "reset-pin":
        body["newPin"] = args.new_pin
    return body


def main(argv: Sequence[str] | None = None, services: Services | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    get_logger()

    svc = services or open_services()
    principal = Principal(uid=args.uid, token=args.token)
    try:
        response = svc.rpc.call(_OPERATIONS[args.command], _request(args), principal)
    except ServiceError as exc:
        print(json.dumps({"ok": False, "error": exc.as_dict()}), file=sys.stderr)
        return 2
    print(json.dumps(response, indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
