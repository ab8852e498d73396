"""Field normalisation shared by all source adapters."""
from __future__ import annotations

import re
from typing import Any

from ghostjobs.models import LocationType, RawPosting

_SALARY_NUMBER = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*([kK])?")


def text(value: Any) -> str:
    """Stringify an API field; ``None`` and missing values become ``""``."""
    if value is None:
        return ""
    return str(value).strip()


def first_text(*values: Any) -> str:
    for v in values:
        s = text(v)
        if s:
            return s
    return ""


def infer_location_type(location: str, default: LocationType) -> LocationType:
    if "remote" in location.lower():
        return "REMOTE"
    return default


def parse_salary(value: Any) -> tuple[int | None, int | None]:
    """Parse ``95000``, ``"$120k"``, ``"$80,000 - $100,000"`` or ``"80-100k"`` into (min, max).

    A single figure is both bounds. Unparseable or empty input gives (None, None).
    """
    if value is None or isinstance(value, bool):
        return None, None
    if isinstance(value, (int, float)):
        if value <= 0:
            return None, None
        return int(value), int(value)

    raw = str(value)
    matches = _SALARY_NUMBER.findall(raw)
    if not matches:
        return None, None

    any_k = any(suffix for _, suffix in matches)
    amounts: list[int] = []
    for number, suffix in matches:
        try:
            amount = float(number.replace(",", ""))
        except ValueError:
            continue
        # "80-100k": a bare figure next to a k-suffixed one is in thousands too.
        if suffix or (any_k and amount < 1000):
            amount *= 1000
        if amount > 0:
            amounts.append(int(amount))
    if not amounts:
        return None, None

    low = amounts[0]
    high = amounts[1] if len(amounts) > 1 else amounts[0]
    return min(low, high), max(low, high)


def salary_bound(value: Any, *, upper: bool = False) -> int | None:
    low, high = parse_salary(value)
    return high if upper else low


def company_from_token(token: str) -> str:
    return token[:1].upper() + token[1:]


def build_posting(
    *,
    title: Any,
    company: Any,
    location: str,
    location_type: LocationType,
    apply_url: Any,
    source_url: Any,
    source: str,
    description: Any = "",
    salary_min: int | None = None,
    salary_max: int | None = None,
) -> RawPosting | None:
    """Return a ``RawPosting`` or ``None`` when title, company or apply URL is missing."""
    title_s, company_s, apply_s = text(title), text(company), text(apply_url)
    if not (title_s and company_s and apply_s):
        return None
    if salary_min is not None and salary_max is not None and salary_max < salary_min:
        salary_min, salary_max = salary_max, salary_min
    return RawPosting(
        title=title_s,
        company=company_s,
        location=location,
        location_type=location_type,
        apply_url=apply_s,
        source_url=text(source_url) or apply_s,
        source=source,
        description=text(description),
        salary_min=salary_min,
        salary_max=salary_max,
    )
