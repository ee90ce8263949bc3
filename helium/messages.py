"""Encoding of the control messages sent inside the secure session."""

import struct

from .config import CONFIG_TEXT_FIELD_LENGTH
from .enums import AuthType, MsgId, PaddingType
from .errors import HeError, ReturnCode

MAX_MTU = 1350

_HEADER = struct.Struct("!B")
_USERPASS = struct.Struct(
    f"!BBBB{CONFIG_TEXT_FIELD_LENGTH}s{CONFIG_TEXT_FIELD_LENGTH}s"
)
_AUTH_BUFFER_HEADER = struct.Struct("!BBH")

MAX_AUTH_BUFFER_LENGTH = MAX_MTU - _AUTH_BUFFER_HEADER.size

_SMALL_BUCKET = 450
_MEDIUM_BUCKET = 900


def encode_goodbye():
    """Return the message announcing that this side is going away."""
    return _HEADER.pack(MsgId.GOODBYE)


def encode_ping():
    """Return a keepalive message."""
    return _HEADER.pack(MsgId.PING)


def _credential(value):
    raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    # The stored field keeps room for a terminator.
    return raw[: CONFIG_TEXT_FIELD_LENGTH - 1]


def encode_auth_userpass(username, password):
    """Return a username/password authentication message with padded fields."""
    user = _credential(username)
    secret = _credential(password)
    return _USERPASS.pack(
        MsgId.AUTH, AuthType.USERPASS, len(user), len(secret), user, secret
    )


def encode_auth_buffer(auth_type, buffer):
    """Return an authentication message carrying an opaque buffer."""
    payload = bytes(buffer)
    if _AUTH_BUFFER_HEADER.size + len(payload) > MAX_MTU:
        raise HeError(ReturnCode.ERR_INVALID_CONN_STATE, "authentication buffer too large")
    header = _AUTH_BUFFER_HEADER.pack(MsgId.AUTH, int(auth_type), len(payload))
    return header + payload


def data_packet_length(padding_type, length):
    """Return the padded length of a data packet of ``length`` bytes."""
    padding_type = PaddingType(padding_type)
    if padding_type is PaddingType.NONE:
        return length
    if padding_type is PaddingType.FULL:
        return MAX_MTU
    # Pad to coarse buckets to hide true lengths without always filling the packet.
    if length <= _SMALL_BUCKET:
        return _SMALL_BUCKET
    if length <= _MEDIUM_BUCKET:
        return _MEDIUM_BUCKET
    return MAX_MTU