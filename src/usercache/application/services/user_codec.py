"""JSON codec for users stored in the fast cache."""

import json

from usercache.domain.entities import PlatformUser


def encode_user(user: PlatformUser) -> bytes:
    """Encode a user for the fast cache."""
    return json.dumps(user.to_dict(), separators=(",", ":")).encode("utf-8")


def decode_user(payload: bytes | str) -> PlatformUser:
    """Decode a fast cache payload.

    Args:
        payload: Bytes written by encode_user().

    Returns:
        Decoded user.

    Raises:
        ValueError: If the payload is not a valid encoded user.
    """
    try:
        data = json.loads(payload)
        return PlatformUser.from_dict(data)
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed cached user: {e}") from e
