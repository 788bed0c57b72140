"""Utility helpers shared across modules."""
from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional
from urllib.parse import urlparse, urlunparse
from zoneinfo import ZoneInfo

import orjson

CACHE_ROOT = Path("./cache")

MONTH_NAMES: dict[str, tuple[str, ...]] = {
    "en": (
        "January",
        "February",
        "March",
        "April",
        "May",
        "June",
        "July",
        "August",
        "September",
        "October",
        "November",
        "December",
    ),
    "pt": (
        "Janeiro",
        "Fevereiro",
        "Março",
        "Abril",
        "Maio",
        "Junho",
        "Julho",
        "Agosto",
        "Setembro",
        "Outubro",
        "Novembro",
        "Dezembro",
    ),
}


def ensure_cache_dir(*parts: str) -> Path:
    """Return a cache directory ensuring it exists."""

    path = CACHE_ROOT.joinpath(*parts)
    path.mkdir(parents=True, exist_ok=True)
    return path


def json_dumps(data: Any) -> str:
    return orjson.dumps(data, default=str).decode("utf-8")


def json_loads(data: str) -> Any:
    return orjson.loads(data)


def write_jsonl(path: Path, records: Iterable[Any], *, mode: str = "a") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open(mode, encoding="utf-8") as fh:
        for item in records:
            fh.write(json_dumps(item))
            fh.write("\n")


def read_jsonl(path: Path) -> Iterator[Any]:
    if not path.exists():
        return iter(())
    return _iter_jsonl(path)


def _iter_jsonl(path: Path) -> Iterator[Any]:
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            yield json_loads(line)


def resolve_tz(name: Optional[str]) -> Optional[tzinfo]:
    if not name:
        return None
    return ZoneInfo(name)


def to_local(ts: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Return ``ts`` as wall-clock time in ``tz``.

    Naive timestamps are taken as already local. Aware timestamps are converted
    to ``tz``, or to the system local zone when no zone is given.
    """

    if ts.tzinfo is None:
        return ts
    return ts.astimezone(tz)


def to_aware(ts: datetime) -> datetime:
    """Return ``ts`` with an offset so naive and aware values compare.

    Naive timestamps are read as system local time.
    """

    if ts.tzinfo is not None:
        return ts
    return ts.astimezone()


def month_key(ts: datetime, tz: Optional[tzinfo] = None) -> tuple[int, int]:
    local = to_local(ts, tz)
    return local.year, local.month


def month_label(year: int, month: int, locale: str = "en") -> str:
    names = MONTH_NAMES.get(locale, MONTH_NAMES["en"])
    return f"{names[month - 1]} {year}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse the timestamp shapes the backend emits (ISO strings, epoch millis)."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        # Jackson may serialise LocalDateTime as [y, m, d, H, M, S]
        return datetime(*[int(part) for part in value[:6]])
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def safe_div(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return numerator / denominator


def human_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    value = float(size)
    idx = 0
    while value >= 1024 and idx < len(units) - 1:
        value /= 1024
        idx += 1
    return f"{round(value, 2):g} {units[idx]}"


def redact_credentials(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.password:
        return url
    netloc = parsed.netloc.replace(f":{parsed.password}@", ":REDACTED@")
    return urlunparse(parsed._replace(netloc=netloc))
