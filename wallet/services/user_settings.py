"""
Per-user settings stored as a JSON object.

The only setting the ledger itself reads is ``timezone``, used to render
stored UTC timestamps in the user's local time.
"""

import logging
from datetime import datetime, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings

from wallet.exceptions import NotFoundError, ValidationError
from wallet.models import User, UserSettings

logger = logging.getLogger(__name__)

TIMEZONE_KEY = 'timezone'


def default_timezone() -> str:
    return getattr(settings, 'WALLET_DEFAULT_TIMEZONE', 'UTC')


def _settings_row(user: User) -> UserSettings:
    row, _ = UserSettings.objects.get_or_create(user=user)
    return row


def get_settings(user: User) -> dict:
    """Read-only lookup; users without a settings row have none."""
    row = UserSettings.objects.filter(user=user).first()
    return dict(row.values) if row is not None else {}


def replace_settings(user: User, values: dict) -> dict:
    if TIMEZONE_KEY in values:
        _parse_timezone(values[TIMEZONE_KEY])
    row = _settings_row(user)
    row.values = dict(values)
    row.save(update_fields=['values', 'updated_at'])
    return row.values


def get_setting(user: User, key: str) -> Any:
    values = get_settings(user)
    if key not in values:
        raise NotFoundError(f"Setting '{key}' not found")
    return values[key]


def set_setting(user: User, key: str, value: Any) -> dict:
    if key == TIMEZONE_KEY:
        _parse_timezone(value)
    row = _settings_row(user)
    row.values[key] = value
    row.save(update_fields=['values', 'updated_at'])
    return row.values


def delete_setting(user: User, key: str) -> dict:
    row = UserSettings.objects.filter(user=user).first()
    if row is None or key not in row.values:
        raise NotFoundError(f"Setting '{key}' not found")
    del row.values[key]
    row.save(update_fields=['values', 'updated_at'])
    return row.values


def reset_settings(user: User) -> dict:
    return replace_settings(user, {})


def _parse_timezone(name: Any) -> ZoneInfo:
    if not isinstance(name, str) or not name:
        raise ValidationError("Timezone must be a non-empty string", field='timezone')
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone: {name}", field='timezone') from exc


def get_timezone(user: User) -> str:
    """Return the stored timezone name, or the default when none is set."""
    return get_settings(user).get(TIMEZONE_KEY) or default_timezone()


def set_timezone(user: User, name: str) -> str:
    set_setting(user, TIMEZONE_KEY, name)
    return name


def get_timezone_info(user: Optional[User]) -> tzinfo:
    """
    Resolve the user's timezone.

    Anonymous users, missing settings and names that no longer resolve all
    fall back to UTC.
    """
    if user is None or not user.is_authenticated:
        return ZoneInfo('UTC')
    name = get_timezone(user)
    try:
        return _parse_timezone(name)
    except ValidationError:
        logger.warning("User %s has an invalid timezone %r; using UTC", user.pk, name)
        return ZoneInfo('UTC')


def to_user_timezone(value: datetime, zone: tzinfo) -> datetime:
    return value.astimezone(zone)
