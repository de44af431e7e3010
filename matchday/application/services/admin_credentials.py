"""Versioned PIN credential and admin sessions per league.

A league has at most one PIN credential. Proving knowledge of the PIN issues
a signed admin claim bound to the caller and to the credential version. Each
claim is also recorded server-side so it can be revoked, and every check
compares its version against the credential's current version: rotating the
PIN invalidates older claims immediately.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

from matchday.domain.entities import AdminClaim, AdminCredential, League
from matchday.domain.errors import (
    FailedPrecondition,
    InvalidArgument,
    NotFound,
    PermissionDenied,
    Unauthenticated,
)
from matchday.domain.value_objects.ids import LeagueId
from matchday.infrastructure import crypto
from matchday.repositories.leagues import LeagueRepo
from matchday.repositories.sessions import SessionRecord, SessionRepo

from .match_ledger import validate_league_id

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"^\d{4}$")
DEFAULT_SESSION_TTL = 12 * 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller; ``token`` is a previously granted admin claim, if any."""

    uid: Optional[str]
    token: Optional[str] = None


@dataclass(frozen=True)
class AdminGrant:
    league_id: str
    version: int
    token: str
    expires_at: datetime


def validate_pin(pin: object) -> str:
    if not isinstance(pin, str) or not PIN_PATTERN.match(pin):
        raise InvalidArgument("PIN must be exactly 4 digits.")
    return pin


def _require_signed_in(caller: Optional[Principal]) -> str:
    if caller is None or not isinstance(caller.uid, str) or not caller.uid.strip():
        raise Unauthenticated("Must be signed in.")
    return caller.uid


class AdminCredentialService:
    def __init__(
        self,
        leagues: LeagueRepo,
        sessions: SessionRepo,
        secret: str,
        *,
        session_ttl_seconds: int = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        self._leagues = leagues
        self._sessions = sessions
        self._secret = secret
        self._ttl = timedelta(seconds=int(session_ttl_seconds))
        self._clock = clock

    # --------------------------- Operations ---------------------------
    def set_pin(self, caller: Principal, league_id: str, pin: str) -> AdminGrant:
        """One-time PIN setup; only allowed while the league has no credential."""
        uid = _require_signed_in(caller)
        lid = validate_league_id(league_id)
        validate_pin(pin)

        league = self._leagues.get(lid) or League(league_id=lid)
        if league.credential is not None:
            raise FailedPrecondition("PIN is already set.")

        league.credential = self._new_credential(pin, version=1)
        self._leagues.save(league)
        logger.info("Admin PIN set (version 1)", extra={"league_id": lid})
        return self._grant(uid, lid, 1)

    def verify_pin(self, caller: Principal, league_id: str, pin: str) -> AdminGrant:
        uid = _require_signed_in(caller)
        lid = validate_league_id(league_id)
        validate_pin(pin)

        league = self._leagues.get(lid)
        if league is None:
            raise NotFound("League not found.")
        if league.credential is None:
            raise NotFound("PIN not set yet.")
        if not crypto.pin_matches(pin, league.credential.salt, league.credential.pin_hash):
            logger.warning("Incorrect PIN attempt", extra={"league_id": lid})
            raise PermissionDenied("Incorrect PIN.")
        return self._grant(uid, lid, league.credential.version)

    def reset_pin(self, caller: Principal, league_id: str, new_pin: str) -> AdminGrant:
        """Rotate the PIN; requires a current admin claim and bumps the version by one."""
        uid = _require_signed_in(caller)
        lid = validate_league_id(league_id)
        validate_pin(new_pin)

        claim = self._verified_claim(caller, lid, require_current_version=False)
        if claim is None:
            raise PermissionDenied("Admin required.")

        league = self._leagues.get(lid)
        if league is None:
            raise NotFound("League not found.")
        if league.credential is None:
            raise NotFound("PIN not set yet.")
        if claim.version != league.credential.version:
            raise PermissionDenied("Admin session is out of date. Verify the current PIN.")

        version = league.credential.version + 1
        league.credential = self._new_credential(new_pin, version=version)
        self._leagues.save(league)
        logger.info("Admin PIN rotated (version %d)", version, extra={"league_id": lid})
        return self._grant(uid, lid, version)

    def clear_admin(self, caller: Principal, league_id: str) -> int:
        """Revoke every admin session of the caller for the league, whatever the PIN version."""
        uid = _require_signed_in(caller)
        lid = validate_league_id(league_id)

        claim = self._verified_claim(caller, lid, require_current_version=False)
        if claim is None:
            raise PermissionDenied("Only admin can clear admin status.")
        revoked = self._sessions.revoke_for_principal(uid, lid, self._clock())
        logger.info("Admin status cleared (%d sessions)", revoked, extra={"league_id": lid})
        return revoked

    def is_admin(self, caller: Optional[Principal], league_id: str) -> bool:
        """Server-side check used by mutating callers to bypass the edit lock."""
        if caller is None or not caller.uid or not caller.token:
            return False
        if not isinstance(league_id, str) or not league_id.strip():
            return False
        return self._verified_claim(caller, LeagueId(league_id)) is not None

    # --------------------------- Internals ---------------------------
    def _new_credential(self, pin: str, *, version: int) -> AdminCredential:
        salt = crypto.new_salt_hex()
        return AdminCredential(
            pin_hash=crypto.hash_pin(pin, salt),
            salt=salt,
            version=version,
            set_at=self._clock(),
        )

    def _grant(self, uid: str, league_id: LeagueId, version: int) -> AdminGrant:
        now = self._clock()
        issued = datetime.fromtimestamp(int(now.timestamp()), timezone.utc)
        expires = issued + self._ttl
        session_id = uuid4().hex

        # A principal holds one claim per league; issuing a new one replaces the old.
        self._sessions.revoke_for_principal(uid, league_id, now)
        self._sessions.insert(
            SessionRecord(
                session_id=session_id,
                principal=uid,
                league_id=league_id,
                version=version,
                issued_at=issued,
                expires_at=expires,
            )
        )
        token = crypto.sign_payload(
            {
                "sid": session_id,
                "uid": uid,
                "lid": league_id,
                "v": version,
                "admin": True,
                "iat": int(issued.timestamp()),
                "exp": int(expires.timestamp()),
            },
            self._secret,
        )
        return AdminGrant(league_id=league_id, version=version, token=token, expires_at=expires)

    def _verified_claim(
        self, caller: Principal, league_id: LeagueId, *, require_current_version: bool = True
    ) -> Optional[AdminClaim]:
        if not caller.token:
            return None
        payload = crypto.verify_token(caller.token, self._secret)
        if payload is None:
            return None
        try:
            claim = AdminClaim(
                session_id=str(payload["sid"]),
                principal=str(payload["uid"]),
                league_id=LeagueId(str(payload["lid"])),
                version=int(payload["v"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), timezone.utc),
                admin=payload.get("admin") is True,
            )
        except (KeyError, TypeError, ValueError):
            return None

        if not claim.admin or claim.principal != caller.uid or claim.league_id != league_id:
            return None
        if claim.expired(self._clock()):
            return None

        record = self._sessions.get(claim.session_id)
        if record is None or record.revoked or record.version != claim.version:
            return None

        if require_current_version:
            league = self._leagues.get(league_id)
            if league is None or league.credential is None:
                return None
            if league.credential.version != claim.version:
                return None
        return claim
