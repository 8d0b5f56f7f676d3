"""Request validators.

Every validator returns a ValidationVerdict and never raises, so the HTTP
layer can report the first failing check verbatim.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

MAX_PROMPT_LENGTH = 4000
MIN_DIMENSION = 256
MAX_DIMENSION = 2048
DIMENSION_ALIGNMENT = 8
MIN_STEPS = 1
MAX_STEPS = 50
ALLOWED_SCALES = (2, 4)


@dataclass(frozen=True)
class ValidationVerdict:
    valid: bool
    error: Optional[str] = None


OK = ValidationVerdict(True)


def _invalid(message: str) -> ValidationVerdict:
    return ValidationVerdict(False, message)


def _is_int(value: Any) -> bool:
    """Whole numbers only; JSON clients may send 1024.0 for 1024"""
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, float) and value.is_integer())


def validate_prompt(prompt: Any, max_length: int = MAX_PROMPT_LENGTH) -> ValidationVerdict:
    if not isinstance(prompt, str) or not prompt.strip():
        return _invalid("Prompt is required")
    if len(prompt) > max_length:
        return _invalid(f"Prompt exceeds maximum length of {max_length} characters")
    return OK


def _validate_dimension(name: str, value: Any, minimum: int, maximum: int, alignment: int) -> ValidationVerdict:
    if not _is_int(value):
        return _invalid(f"{name} must be an integer")
    if value < minimum or value > maximum:
        return _invalid(f"{name} must be between {minimum} and {maximum}")
    if value % alignment != 0:
        return _invalid(f"{name} must be a multiple of {alignment}")
    return OK


def validate_dimensions(
    width: Any,
    height: Any,
    minimum: int = MIN_DIMENSION,
    maximum: int = MAX_DIMENSION,
    alignment: int = DIMENSION_ALIGNMENT,
) -> ValidationVerdict:
    verdict = _validate_dimension("Width", width, minimum, maximum, alignment)
    if not verdict.valid:
        return verdict
    return _validate_dimension("Height", height, minimum, maximum, alignment)


def validate_steps(steps: Any, minimum: int = MIN_STEPS, maximum: int = MAX_STEPS) -> ValidationVerdict:
    if not _is_int(steps):
        return _invalid("Steps must be an integer")
    if steps < minimum or steps > maximum:
        return _invalid(f"Steps must be between {minimum} and {maximum}")
    return OK


def validate_scale(scale: Any, allowed: Iterable[int] = ALLOWED_SCALES) -> ValidationVerdict:
    allowed = tuple(allowed)
    if not _is_int(scale) or scale not in allowed:
        return _invalid(f"Scale must be one of {', '.join(str(s) for s in allowed)}")
    return OK


def is_allowed_image_url(url: Any, allowed_hosts: Iterable[str]) -> bool:
    """True when url is http(s) and its host is, or is a subdomain of, an allowed host"""
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not host:
        return False
    for allowed in allowed_hosts:
        allowed = allowed.lower().lstrip(".")
        if host == allowed or host.endswith("." + allowed):
            return True
    return False
