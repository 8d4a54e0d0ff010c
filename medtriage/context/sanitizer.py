"""PII scrubbing for alert context, error messages, and stack traces.

``scrub`` is the mandatory last pass over every context: deny-listed keys are
dropped at any depth, then each string leaf has emails, phone numbers, and
bare numeric identifiers redacted. Replacement tokens contain no digits or
``@``, so running ``scrub`` twice yields the same result as running it once.
"""

from __future__ import annotations

import re
from typing import Any

EMAIL_TOKEN = "[email]"
PHONE_TOKEN = "[phone]"
ID_TOKEN = "[id]"

_EMAIL_RE = re.compile(r"[\w.+-]+@[\w.-]+\.\w+")
# Optional "+", at least 7 characters of digits / spaces / dashes / parens,
# starting and ending with a digit, not glued to a word.
_PHONE_RE = re.compile(r"(?<!\w)\+?\d[\d\s\-()]{5,}\d(?!\w)")
_ID_RE = re.compile(r"\b\d{6,}\b")
# ISO-8601 dates and timestamps; left intact by phone and id redaction.
_DATE_RE = re.compile(
    r"(\b\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?)"
)

PII_FIELDS: frozenset[str] = frozenset({
    "patientid",
    "userid",
    "patientname",
    "username",
    "fullname",
    "firstname",
    "lastname",
    "email",
    "phone",
    "address",
    "medicalid",
    "socialsecuritynumber",
    "insuranceid",
    "medicalhistory",
})

_ROUTE_ID_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"/user/\d+"), "/user/[id]"),
    (re.compile(r"/patient/\d+"), "/patient/[id]"),
    (re.compile(r"/appointment/\d+"), "/appointment/[id]"),
)
_ROUTE_MAX_LEN = 50
_USER_AGENT_MAX_LEN = 100

_STACK_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"/home/[^/\s]+"), "/home/[user]"),
    (re.compile(r"/Users/[^/\s]+"), "/Users/[user]"),
    (re.compile(r"patient_id=\w+", re.IGNORECASE), "patient_id=[redacted]"),
    (re.compile(r"email=[^&\s]+", re.IGNORECASE), "email=[redacted]"),
    (re.compile(r"\bname=[^&\s]+", re.IGNORECASE), "name=[redacted]"),
)


def _normalise_key(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


def is_pii_field(key: str, deny_list: frozenset[str] = PII_FIELDS) -> bool:
    """True if *key* names a deny-listed field (case/separator-insensitive)."""
    return _normalise_key(key) in deny_list


def _redact_numbers(text: str) -> str:
    text = _PHONE_RE.sub(PHONE_TOKEN, text)
    return _ID_RE.sub(ID_TOKEN, text)


def scrub_text(text: str) -> str:
    """Redact emails, then phone numbers, then bare 6+-digit identifiers.

    ISO dates such as ``2024-01-15T10:30:00Z`` are not phone numbers and
    pass through unchanged.
    """
    text = _EMAIL_RE.sub(EMAIL_TOKEN, text)
    # split() with one capturing group puts dates at the odd indices
    parts = _DATE_RE.split(text)
    return "".join(
        part if i % 2 else _redact_numbers(part) for i, part in enumerate(parts)
    )


def strip_pii_fields(data: dict[str, Any], deny_list: frozenset[str] = PII_FIELDS) -> dict[str, Any]:
    """Shallow copy of *data* without deny-listed keys."""
    return {k: v for k, v in data.items() if not (isinstance(k, str) and is_pii_field(k, deny_list))}


def scrub(data: Any, deny_list: frozenset[str] = PII_FIELDS) -> Any:
    """Recursively scrub a JSON-like structure, returning a new structure.

    Dicts lose deny-listed keys, lists/tuples are walked element-wise, strings
    are redacted with ``scrub_text``. Other leaves are returned unchanged.
    """
    if isinstance(data, dict):
        return {
            k: scrub(v, deny_list)
            for k, v in strip_pii_fields(data, deny_list).items()
        }
    if isinstance(data, list):
        return [scrub(item, deny_list) for item in data]
    if isinstance(data, tuple):
        return tuple(scrub(item, deny_list) for item in data)
    if isinstance(data, str):
        return scrub_text(data)
    return data


def sanitize_route(route: str | None) -> str:
    """Mask numeric path ids, drop the query string, and cap the length."""
    if not route:
        return "unknown"
    for pattern, replacement in _ROUTE_ID_PATTERNS:
        route = pattern.sub(replacement, route)
    route = route.split("?", 1)[0]
    return route[:_ROUTE_MAX_LEN]


def sanitize_user_agent(user_agent: str | None) -> str:
    """Blur exact version numbers in a user-agent string."""
    if not user_agent:
        return "unknown"
    ua = re.sub(r"\d+\.\d+\.\d+", "X.X.X", user_agent)
    ua = re.sub(r"Version/\d+\.\d+", "Version/X.X", ua)
    return ua[:_USER_AGENT_MAX_LEN]


def sanitize_stack(stack: str | None) -> str | None:
    """Mask user home directories and identifying query values in a traceback."""
    if stack is None:
        return None
    for pattern, replacement in _STACK_PATTERNS:
        stack = pattern.sub(replacement, stack)
    return scrub_text(stack)
