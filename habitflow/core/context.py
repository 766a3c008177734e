"""
Per-request context supplied by upstream collaborators.

X-User-Id    owner of every habit the request touches (auth happens upstream)
X-Timezone   IANA zone of the requesting user; decides what "today" is
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Header

from habitflow.core.config import settings
from habitflow.core.errors import InvalidTimezoneError


def get_owner_id(x_user_id: int = Header(..., ge=1, description="Owner of the habits.")) -> int:
    return x_user_id


def resolve_zone(tz_name: Optional[str]) -> ZoneInfo:
    name = (tz_name or settings.DEFAULT_TIMEZONE).strip()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezoneError(name) from exc


def today_in(tz_name: Optional[str]) -> date:
    return datetime.now(tz=resolve_zone(tz_name)).date()


def get_today(
    x_timezone: Optional[str] = Header(
        default=None,
        description="IANA timezone of the user, e.g. Europe/Madrid. Defaults to DEFAULT_TIMEZONE.",
    ),
) -> date:
    return today_in(x_timezone)
