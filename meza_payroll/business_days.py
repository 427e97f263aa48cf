"""Timor-Leste public holiday calendar and business-day helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Iterable, Optional, Tuple

_FIXED_HOLIDAYS = (
    (1, 1, "New Year's Day", "Loron Tinan Foun"),
    (3, 3, "Veterans Day", "Loron Veteranu"),
    (5, 1, "Labor Day", "Loron Trabalhador"),
    (5, 20, "Independence Restoration Day", "Loron Restaurasaun Independensia"),
    (8, 30, "Popular Consultation Day", "Loron Konsulta Popular"),
    (11, 1, "All Saints Day", "Loron Santu Hotu"),
    (11, 2, "All Souls Day", "Loron Finadu"),
    (11, 12, "National Youth Day", "Loron Juventude Nasional"),
    (11, 28, "Independence Proclamation Day", "Loron Proklamasaun Independensia"),
    (12, 7, "Memorial Day", "Loron Memoria"),
    (12, 8, "Immaculate Conception", "Loron Imakulada Konseisaun"),
    (12, 25, "Christmas Day", "Loron Natal"),
    (12, 31, "National Heroes Day", "Loron Heroi Nasional"),
)


@dataclass(frozen=True)
class Holiday:
    day: date
    name: str
    name_tetun: str
    variable: bool = False


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (Meeus/Jones/Butcher)."""

    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


@lru_cache(maxsize=64)
def public_holidays(year: int) -> Tuple[Holiday, ...]:
    """Fixed national holidays plus Good Friday and Corpus Christi.

    Variable holidays such as Eid are not computed; pass them to
    :func:`next_business_day` as ``additional_holidays``.
    """

    holidays = [Holiday(date(year, month, day), name, tetun) for month, day, name, tetun in _FIXED_HOLIDAYS]
    easter = easter_sunday(year)
    holidays.append(Holiday(easter - timedelta(days=2), "Good Friday", "Sesta-feira Santa", variable=True))
    holidays.append(Holiday(easter + timedelta(days=60), "Corpus Christi", "Corpus Christi", variable=True))
    return tuple(sorted(holidays, key=lambda h: h.day))


def coerce_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip()[:10]).date()
    raise TypeError(f"Unsupported date value: {value!r}")


def holiday_name(value: date | datetime | str) -> Optional[str]:
    target = coerce_date(value)
    for holiday in public_holidays(target.year):
        if holiday.day == target:
            return holiday.name
    return None


def is_public_holiday(value: date | datetime | str) -> bool:
    return holiday_name(value) is not None


def next_business_day(
    value: date | datetime | str,
    *,
    additional_holidays: Iterable[date | str] = (),
    removed_holidays: Iterable[date | str] = (),
) -> date:
    """Return ``value`` or the first following weekday that is not a holiday."""

    added = {coerce_date(d) for d in additional_holidays}
    removed = {coerce_date(d) for d in removed_holidays}
    cursor = coerce_date(value)
    # Two weeks covers every cluster of TL holidays plus weekends.
    for _ in range(14):
        base_holiday = is_public_holiday(cursor) and cursor not in removed
        if cursor.weekday() < 5 and not base_holiday and cursor not in added:
            return cursor
        cursor += timedelta(days=1)
    return coerce_date(value)


__all__ = [
    "Holiday",
    "coerce_date",
    "easter_sunday",
    "holiday_name",
    "is_public_holiday",
    "next_business_day",
    "public_holidays",
]
