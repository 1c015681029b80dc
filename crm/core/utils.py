import math
import uuid
from datetime import datetime, timezone
from typing import Any, Optional


def new_id() -> str:
    return uuid.uuid4().hex


def now_iso() -> str:
    """Текущее время UTC в формате 2024-01-31T12:00:00.000Z"""
    return datetime.utcnow().isoformat(timespec="milliseconds") + "Z"


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Разбор ISO-строки в наивный datetime UTC; None для пустых и битых значений"""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_number(value: Any) -> Optional[float]:
    """Число из входных данных (число или числовая строка), иначе None"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
