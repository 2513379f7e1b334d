"""
utils.py
Dates, input coercion at the sheet boundary, form validation.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%m/%d/%Y", "%d-%m-%Y")


def add_months(start: date, months: int) -> date:
    """
    Add months while keeping day in valid range (e.g., Jan 31 + 1 month => Feb 28/29).
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    # last day of target month
    if m == 12:
        next_month = date(y + 1, 1, 1)
    else:
        next_month = date(y, m + 1, 1)
    last_day = next_month - timedelta(days=1)
    day = min(start.day, last_day.day)
    return date(y, m, day)


def iso_or_empty(d: date | None) -> str:
    return d.isoformat() if d else ""


# ---------- Boundary coercion ----------

def coerce_amount(value) -> int:
    """
    Sheet cells arrive as numbers, numeric strings ("2,500", "2500.0") or blanks.
    Anything that doesn't parse to a finite, non-negative amount becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        value = repr(value)
    text = str(value).strip().replace(",", "")
    if not text:
        return 0
    try:
        amount = Decimal(text)
    except InvalidOperation:
        logger.debug("Coercing unparseable amount %r to 0", value)
        return 0
    if not amount.is_finite() or amount < 0:
        logger.debug("Coercing out-of-range amount %r to 0", value)
        return 0
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _local_date(moment: datetime) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def coerce_date(value) -> date | None:
    """
    Accepts date/datetime objects, ISO dates, ISO timestamps ("2024-01-14T19:00:00.000Z")
    and US-style dates. Blank or unparseable input gives None.

    Timestamps carrying an offset are read in local time: the sheet writes
    local midnight as UTC, so the UTC calendar day can be the day before.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return _local_date(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    logger.debug("Could not parse date %r", value)
    return None


def coerce_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


# ---------- Validation ----------

def validate_member_inputs(name: str, phone: str, cnic: str, address: str, admission_fee) -> list[str]:
    errors: list[str] = []
    if len(name.strip()) < 3:
        errors.append("Name must be at least 3 characters.")
    if len(phone.strip()) < 11:
        errors.append("Phone number must be at least 11 digits.")
    if cnic.strip() and len(cnic.strip()) < 13:
        errors.append("CNIC must be 13 digits.")
    if address.strip() and len(address.strip()) < 5:
        errors.append("Address is too short.")
    try:
        fee = float(str(admission_fee).replace(",", ""))
    except ValueError:
        errors.append("Admission fee must be numeric.")
    else:
        if not math.isfinite(fee) or fee < 0:
            errors.append("Admission fee must be zero or a positive number.")
    return errors


def validate_amount(amount) -> list[str]:
    if coerce_amount(amount) <= 0:
        return ["Amount must be a positive number."]
    return []
