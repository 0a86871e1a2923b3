from datetime import date, datetime, timezone

from backend.errors import ValidationFailure


def parse_day_value(raw):
    if isinstance(raw, date):
        return raw
    try:
        return datetime.strptime(str(raw), "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def parse_due_date(raw):
    """
    Resolve a stored due date to a UTC calendar day; None when it cannot be parsed.

    Plain `YYYY-MM-DD` values are taken as-is. Full RFC 3339 timestamps are
    converted to UTC first, so `2024-03-15T23:30:00-05:00` lands on the 16th.
    Naive timestamps are read as UTC.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, date):
        return raw
    else:
        value = str(raw).strip()
        if not value:
            return None
        day = parse_day_value(value)
        if day is not None:
            return day
        if value.endswith(('Z', 'z')):
            value = value[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def normalize_due_date(raw):
    """Empty values clear the due date; anything else is stored as supplied."""
    if raw is None:
        return None
    if isinstance(raw, date):
        return raw.isoformat()
    value = str(raw).strip()
    return value or None


def normalize_text(raw):
    if raw is None:
        return ''
    if not isinstance(raw, str):
        raise ValidationFailure('text must be a string')
    return raw.strip()


def normalize_name(raw):
    if raw is None:
        return ''
    if not isinstance(raw, str):
        raise ValidationFailure('name must be a string')
    return raw


def parse_steps(raw):
    if raw is None:
        return 1
    try:
        steps = int(raw)
    except (TypeError, ValueError):
        raise ValidationFailure('steps must be 1 or 2')
    if steps not in (1, 2):
        raise ValidationFailure('steps must be 1 or 2')
    return steps


def clean_id_list(raw_ids):
    """Require a non-empty list of ids; entries are normalized to strings."""
    if not isinstance(raw_ids, list) or not raw_ids:
        raise ValidationFailure('ids array required')
    ids = []
    for raw_id in raw_ids:
        if raw_id is None:
            continue
        value = str(raw_id).strip()
        if value:
            ids.append(value)
    if not ids:
        raise ValidationFailure('No valid ids provided')
    return ids


def optional_id(raw):
    if raw in (None, '', 'null', 'none'):
        return None
    return str(raw).strip() or None
