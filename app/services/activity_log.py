"""Best-effort activity logging for storage operations.

Entries never influence the outcome of the storage call they describe: they
are written from a background task after the response is sent, with their own
database session, and every failure is logged and dropped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import BackgroundTasks, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import SessionLocal
from app.models.activity_log import ActivityActionType, ActivityLog
from app.models.user import User
from app.services.session_auth import authenticate_request
from app.services.virtual_path import file_name_of, parse_virtual_path

logger = logging.getLogger(__name__)

# Record ids are small integers; Date.now()-style values stand in for ids
# that do not exist yet during create flows.
TIMESTAMP_PLACEHOLDER_THRESHOLD = 1_000_000_000

# Tried in order. The first shape also matches everything the second one does,
# so ``userId_timestamp`` names resolve through it; magnitude tells them apart.
_USER_RECORD_RE = re.compile(r"^(\d+)_(\d+)(?:_[^.]+)?\.[A-Za-z0-9]+$")
_USER_TIMESTAMP_RE = re.compile(r"^(\d+)_(\d{10,})\.[A-Za-z0-9]+$")
_RECORD_RE = re.compile(r"^(\d+)\.[A-Za-z0-9]+$")

SHAPE_USER_RECORD = "user_record"
SHAPE_USER_TIMESTAMP = "user_timestamp"
SHAPE_RECORD = "record"


@dataclass(frozen=True)
class EntityIdMatch:
    entity_id: int
    shape: str

    @property
    def is_placeholder(self) -> bool:
        return is_timestamp_placeholder(self.entity_id)


@dataclass(frozen=True)
class Actor:
    user_id: int
    user_type: int | None


def is_timestamp_placeholder(value: int | None) -> bool:
    return value is not None and value >= TIMESTAMP_PLACEHOLDER_THRESHOLD


def extract_entity_id(virtual_path_or_name: str) -> EntityIdMatch | None:
    file_name = file_name_of(virtual_path_or_name)
    match = _USER_RECORD_RE.fullmatch(file_name)
    if match:
        return EntityIdMatch(int(match.group(2)), SHAPE_USER_RECORD)
    match = _USER_TIMESTAMP_RE.fullmatch(file_name)
    if match:
        return EntityIdMatch(int(match.group(2)), SHAPE_USER_TIMESTAMP)
    match = _RECORD_RE.fullmatch(file_name)
    if match:
        return EntityIdMatch(int(match.group(1)), SHAPE_RECORD)
    return None


def entity_name_for(virtual_path: str) -> str:
    parts = parse_virtual_path(virtual_path)
    folder = parts.folder if parts else "unknown"
    return f"S3 {folder}"[:100]


def get_client_ip(request: Request) -> str | None:
    headers = request.headers
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = headers.get("x-real-ip") or headers.get("cf-connecting-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None


def lookup_user_type(db: Session, role_id: int) -> int | None:
    """``SELECT user_type FROM users WHERE role_id = ?``; None when unknown or on error."""
    try:
        return db.execute(
            select(User.user_type).where(User.role_id == role_id).limit(1)
        ).scalar_one_or_none()
    except Exception as exc:
        logger.warning("activity_user_type_lookup_failed role_id=%s error=%s", role_id, exc)
        return None


def resolve_actor(
    request: Request,
    body_user_id: int | None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> Actor | None:
    """Session user first, then the request body's ``userId``.

    A failed ``user_type`` lookup still yields an actor; attribution with a
    null type beats dropping the entry.
    """
    try:
        auth = authenticate_request(request)
    except Exception as exc:
        logger.warning("activity_session_check_failed error=%s", exc)
        auth = None
    if auth is not None and auth.user is not None and auth.user.role_id:
        return Actor(user_id=auth.user.role_id, user_type=auth.user.user_type)

    if not body_user_id:
        return None
    try:
        db = session_factory()
    except Exception as exc:
        logger.warning("activity_session_open_failed error=%s", exc)
        return Actor(user_id=body_user_id, user_type=None)
    try:
        user_type = lookup_user_type(db, body_user_id)
    finally:
        db.close()
    return Actor(user_id=body_user_id, user_type=user_type)


def log_activity(
    db: Session,
    *,
    action: ActivityActionType,
    entity_name: str,
    entity_id: int | None,
    actor: Actor,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ActivityLog:
    entry = ActivityLog(
        performed_by_id=actor.user_id,
        performed_by_type=actor.user_type,
        action_type=action.value,
        entity_name=entity_name,
        entity_id=entity_id,
        ip_address=ip_address,
        user_agent=user_agent[:255] if user_agent else None,
    )
    db.add(entry)
    db.commit()
    return entry


def record_storage_activity(
    request: Request,
    *,
    action: ActivityActionType,
    virtual_path: str,
    body_user_id: int | None = None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> None:
    """Write one entry for a storage operation; swallows every failure."""
    try:
        match = extract_entity_id(virtual_path)
        if match is not None and match.is_placeholder:
            # The caller re-logs with the real record id once it is persisted.
            logger.debug(
                "activity_skipped_placeholder key=%s entity_id=%s",
                virtual_path,
                match.entity_id,
            )
            return
        actor = resolve_actor(request, body_user_id, session_factory)
        if actor is None:
            logger.warning("activity_skipped_no_user action=%s key=%s", action.value, virtual_path)
            return
        db = session_factory()
        try:
            log_activity(
                db,
                action=action,
                entity_name=entity_name_for(virtual_path),
                entity_id=match.entity_id if match else None,
                actor=actor,
                ip_address=get_client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
    except Exception:
        logger.exception("activity_log_failed action=%s key=%s", action.value, virtual_path)


def queue_storage_activity(
    background_tasks: BackgroundTasks,
    request: Request,
    *,
    action: ActivityActionType,
    virtual_path: str,
    body_user_id: int | None = None,
    session_factory: Callable[[], Session] | None = None,
) -> None:
    """Detach :func:`record_storage_activity` until after the response is sent."""
    background_tasks.add_task(
        record_storage_activity,
        request,
        action=action,
        virtual_path=virtual_path,
        body_user_id=body_user_id,
        session_factory=session_factory or SessionLocal,
    )
