"""Remote procedure surface.

Thin request/response layer over :class:`AdminCredentialService` using the
wire field names (``leagueId``, ``pin``, ``newPin``) and the match-created
trigger consumed by :class:`LockScheduler`.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from matchday.domain.errors import InvalidArgument
from matchday.infrastructure.events import MatchCreated

from .services.admin_credentials import AdminCredentialService, AdminGrant, Principal
from .services.lock_scheduler import LockScheduler

DEFAULT_LEAGUE_ID = "default"


def _grant_response(grant: AdminGrant) -> dict[str, Any]:
    return {
        "ok": True,
        "adminPinVersion": grant.version,
        "token": grant.token,
        "expiresAt": grant.expires_at.isoformat(),
    }


class AdminRpc:
    """Dispatch ``setPin``, ``verifyPin``, ``resetPin`` and ``clearAdmin`` calls."""

    def __init__(self, service: AdminCredentialService) -> None:
        self._service = service
        self._handlers: dict[str, Callable[[Principal, Mapping[str, Any]], dict[str, Any]]] = {
            "setPin": self._set_pin,
            "verifyPin": self._verify_pin,
            "resetPin": self._reset_pin,
            "clearAdmin": self._clear_admin,
        }

    @property
    def operations(self) -> list[str]:
        return list(self._handlers)

    def call(
        self, name: str, request: Optional[Mapping[str, Any]], principal: Optional[Principal]
    ) -> dict[str, Any]:
        handler = self._handlers.get(name)
        if handler is None:
            raise InvalidArgument(f"Unknown operation: {name}")
        data = request or {}
        if not isinstance(data, Mapping):
            raise InvalidArgument("Request body must be an object.")
        # Unauthenticated callers are rejected by the service before anything else.
        return handler(principal or Principal(uid=None), data)

    def _set_pin(self, caller: Principal, data: Mapping[str, Any]) -> dict[str, Any]:
        league_id = data.get("leagueId", DEFAULT_LEAGUE_ID)
        return _grant_response(self._service.set_pin(caller, league_id, data.get("pin")))  # type: ignore[arg-type]

    def _verify_pin(self, caller: Principal, data: Mapping[str, Any]) -> dict[str, Any]:
        league_id = data.get("leagueId", DEFAULT_LEAGUE_ID)
        return _grant_response(self._service.verify_pin(caller, league_id, data.get("pin")))  # type: ignore[arg-type]

    def _reset_pin(self, caller: Principal, data: Mapping[str, Any]) -> dict[str, Any]:
        league_id = data.get("leagueId", DEFAULT_LEAGUE_ID)
        return _grant_response(self._service.reset_pin(caller, league_id, data.get("newPin")))  # type: ignore[arg-type]

    def _clear_admin(self, caller: Principal, data: Mapping[str, Any]) -> dict[str, Any]:
        self._service.clear_admin(caller, data.get("leagueId", DEFAULT_LEAGUE_ID))
        return {"ok": True, "message": "Admin status cleared."}


def on_match_created(scheduler: LockScheduler, event: Mapping[str, Any]) -> None:
    """One-way trigger: patch ``lockAt`` for the created match. Returns nothing."""
    scheduler.on_match_created(
        MatchCreated(league_id=str(event.get("leagueId")), match_id=str(event.get("matchId")))
    )
