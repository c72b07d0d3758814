import re

DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
TIME_RE = re.compile(r"\d{2}:\d{2}")
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# largest values the Integer / BigInteger columns can hold
MAX_INT = 2 ** 31 - 1
MAX_BIGINT = 2 ** 63 - 1


def normalize_email(value) -> str:
    return (value or "").strip().lower() if isinstance(value, str) else ""


def is_valid_date(value) -> bool:
    return isinstance(value, str) and DATE_RE.fullmatch(value) is not None


def is_valid_time(value) -> bool:
    return isinstance(value, str) and TIME_RE.fullmatch(value) is not None


def is_valid_email(value) -> bool:
    return isinstance(value, str) and len(value) <= 255 and EMAIL_RE.fullmatch(value) is not None


def clean_text(value, default: str = "", max_length: int = 255) -> str:
    """Trim a client-supplied string, fall back to default when blank, clamp the length."""
    if value is None:
        return default
    text = str(value).strip()
    if not text:
        return default
    return text[:max_length]


def parse_positive_int(value, max_value: int = MAX_INT):
    """Return value as an int in 1..max_value, or None when it is missing or unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value) if isinstance(value, (int, float)) else int(str(value).strip())
    except (ValueError, OverflowError):
        return None
    return number if 1 <= number <= max_value else None
