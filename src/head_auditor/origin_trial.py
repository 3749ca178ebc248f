# src/head_auditor/origin_trial.py
import base64
import binascii
import json
import logging
import struct
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# Token layout: 1-byte version, 64-byte signature, 4-byte big-endian payload length, payload
VERSION_OFFSET = 0
SIGNATURE_OFFSET = 1
SIGNATURE_LENGTH = 64
LENGTH_OFFSET = SIGNATURE_OFFSET + SIGNATURE_LENGTH
PAYLOAD_OFFSET = LENGTH_OFFSET + 4
HEADER_LENGTH = PAYLOAD_OFFSET

DEFAULT_PORTS = {'http': 80, 'https': 443, 'ws': 80, 'wss': 443}


class DecodeError(ValueError):
    """Raised when an origin trial token cannot be decoded."""


class OriginTrialToken(BaseModel):
    """Decoded origin trial token payload."""
    model_config = ConfigDict(frozen=True)

    version: int
    signature: bytes
    origin: str
    feature: str = ""
    expiry: datetime
    is_subdomain: bool = False
    is_third_party: bool = False
    usage: Optional[str] = None


class TokenValidation(BaseModel):
    """Outcome of validating a token; `code` names the failure when `valid` is False."""
    model_config = ConfigDict(frozen=True)

    valid: bool
    code: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    token: Optional[OriginTrialToken] = None


def _b64decode(text: str) -> bytes:
    compact = "".join(text.split())
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Unable to decode token: invalid base64 ({e})") from e


def decode_token(text: str) -> OriginTrialToken:
    """
    Decodes a base64 origin trial token.

    Args:
        text (str): The token as found in the meta content attribute.

    Returns:
        OriginTrialToken: The decoded payload.

    Raises:
        DecodeError: If the text is not base64, the buffer is shorter than the
            header, the declared payload length runs past the buffer, or the
            payload is not a JSON object with `origin` and numeric `expiry`.
    """
    buffer = _b64decode(text)

    if len(buffer) < HEADER_LENGTH:
        raise DecodeError(
            f"Unable to decode token: {len(buffer)} bytes is shorter than the {HEADER_LENGTH}-byte header"
        )

    version = buffer[VERSION_OFFSET]
    signature = bytes(buffer[SIGNATURE_OFFSET:SIGNATURE_OFFSET + SIGNATURE_LENGTH])
    (length,) = struct.unpack_from(">I", buffer, LENGTH_OFFSET)

    payload_end = PAYLOAD_OFFSET + length
    if payload_end > len(buffer):
        raise DecodeError(
            f"Unable to decode token: payload length {length} exceeds the "
            f"{len(buffer) - PAYLOAD_OFFSET} bytes remaining"
        )

    try:
        payload = json.loads(buffer[PAYLOAD_OFFSET:payload_end].decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Unable to decode token: payload is not JSON ({e})") from e

    if not isinstance(payload, dict):
        raise DecodeError("Unable to decode token: payload is not a JSON object")

    origin = payload.get("origin")
    if not isinstance(origin, str):
        raise DecodeError("Unable to decode token: payload has no origin")

    expiry = payload.get("expiry")
    if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
        raise DecodeError("Unable to decode token: payload has no numeric expiry")

    try:
        expiry_at = datetime.fromtimestamp(expiry, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise DecodeError(f"Unable to decode token: expiry {expiry} is out of range") from e

    feature = payload.get("feature")
    usage = payload.get("usage")
    return OriginTrialToken(
        version=version,
        signature=signature,
        origin=origin,
        feature=feature if isinstance(feature, str) else "",
        expiry=expiry_at,
        is_subdomain=payload.get("isSubdomain") is True,
        is_third_party=payload.get("isThirdParty") is True,
        usage=usage if isinstance(usage, str) else None,
    )


# --- ORIGIN HELPERS ---

def parse_origin(url: str) -> Optional[Tuple[str, str, int]]:
    """Returns (scheme, host, port) with default ports filled in, or None if `url` has no origin."""
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except (ValueError, AttributeError):
        return None

    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if not scheme or not host:
        return None
    if port is None:
        port = DEFAULT_PORTS.get(scheme)
        if port is None:
            return None
    return scheme, host, port


def is_same_origin(a: str, b: str) -> bool:
    origin_a, origin_b = parse_origin(a), parse_origin(b)
    return origin_a is not None and origin_a == origin_b


def is_subdomain(parent: str, child: str) -> bool:
    """True when `child`'s host is a strict dot-separated suffix extension of `parent`'s host."""
    origin_parent, origin_child = parse_origin(parent), parse_origin(child)
    if origin_parent is None or origin_child is None:
        return False
    _, parent_host, parent_port = origin_parent
    _, child_host, child_port = origin_child
    return parent_port == child_port and child_host.endswith(f".{parent_host}")


# --- VALIDATION ---

def validate_origin(token: OriginTrialToken, expected_origin: str) -> TokenValidation:
    """
    Checks the token origin against the site's origin. Third-party tokens are
    injected at runtime, so a static page only carries tokens for its own origin.
    """
    if is_same_origin(token.origin, expected_origin):
        return TokenValidation(valid=True, token=token)

    data = {"tokenOrigin": token.origin, "expectedOrigin": expected_origin}
    if is_subdomain(token.origin, expected_origin):
        if token.is_subdomain:
            return TokenValidation(valid=True, token=token)
        return TokenValidation(valid=False, code="invalidSubdomain", data=data, token=token)

    return TokenValidation(valid=False, code="invalidOrigin", data=data, token=token)


def validate_token(
        text: Optional[str],
        expected_origin: Optional[str] = None,
        now: Optional[datetime] = None
) -> TokenValidation:
    """
    Validates an origin trial token.

    Args:
        text (Optional[str]): The raw token text.
        expected_origin (Optional[str]): The site's production origin, if known.
        now (Optional[datetime]): Reference time for the expiry check; defaults to the current UTC time.
            A naive value is taken as UTC.

    Returns:
        TokenValidation: `valid=True`, or the failure code with its message data.
    """
    if not text or not text.strip():
        return TokenValidation(valid=False, code="emptyToken")

    try:
        token = decode_token(text)
    except DecodeError as e:
        logger.debug("Origin trial token rejected: %s", e)
        return TokenValidation(valid=False, code="invalidToken", data={"error": str(e)})

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if token.expiry < now:
        return TokenValidation(
            valid=False,
            code="expiredToken",
            data={"expiryDate": token.expiry.date().isoformat()},
            token=token,
        )

    if expected_origin:
        return validate_origin(token, expected_origin)

    return TokenValidation(valid=True, token=token)
