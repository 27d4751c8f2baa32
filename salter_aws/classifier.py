from __future__ import annotations

import re

from salter_aws.models import ParameterType


SECRET_KEYWORDS = (
    "password",
    "secret",
    "key",
    "token",
    "api",
    "auth",
    "credential",
    "private",
    "cert",
    "ssl",
    "secure",
)

PEM_MARKER = "-----BEGIN"

# Checked in order after the keyword and PEM checks; first match wins.
LONG_ALNUM = re.compile(r"[A-Za-z0-9+/=]{20,}")
URL_WITH_CREDENTIALS = re.compile(r"https?://[^@]+@")
JWT_SHAPE = re.compile(r"[A-Za-z0-9+/=]+\.[A-Za-z0-9+/=]+\.[A-Za-z0-9+/=]+")
TOKEN_LIKE = re.compile(r"[A-Za-z0-9+/=\-\n]+")
TOKEN_LIKE_MIN_LENGTH = 20


def _key_looks_secret(key: str) -> bool:
    lowered = key.lower()
    return any(keyword in lowered for keyword in SECRET_KEYWORDS)


def _value_looks_secret(value: str) -> bool:
    if PEM_MARKER in value:
        return True
    if LONG_ALNUM.fullmatch(value):
        return True
    if URL_WITH_CREDENTIALS.match(value):
        return True
    if JWT_SHAPE.fullmatch(value):
        return True
    if len(value) > TOKEN_LIKE_MIN_LENGTH and TOKEN_LIKE.fullmatch(value):
        return True
    return False


def detect_parameter_type(key: str, value: str) -> ParameterType:
    """
    Guess whether a key/value pair should be stored encrypted.

    The key is checked for secret-ish keywords first, so a key such as
    ``DB_PASSWORD`` is a SecureString regardless of its value. Otherwise the
    value is checked for PEM blocks, long base64/alphanumeric runs, URLs with
    embedded credentials and JWT-shaped tokens.
    """
    if _key_looks_secret(key or "") or _value_looks_secret(value or ""):
        return ParameterType.SECURE_STRING
    return ParameterType.STRING
