"""Enumerations describing connection state, events and wire message types."""

from enum import Enum, IntEnum


class ConnState(Enum):
    """Lifecycle states of a connection."""

    NONE = 0
    DISCONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3
    AUTHENTICATING = 4
    LINK_UP = 5
    ONLINE = 6
    CONFIGURING = 7


class ConnEvent(Enum):
    """Events reported to the host application through the event callback."""

    FIRST_MESSAGE_RECEIVED = 1
    PONG = 2
    REJECTED_FRAGMENTED_PACKETS_SENT_BY_HOST = 3
    SECURE_RENEGOTIATION_STARTED = 4
    SECURE_RENEGOTIATION_COMPLETED = 5
    PENDING_SESSION_ACKNOWLEDGED = 6


class ConnectionType(Enum):
    """Transport used underneath the secure session."""

    DATAGRAM = 0
    STREAM = 1


class PaddingType(Enum):
    """How data packets are padded before they are sent."""

    NONE = 0
    FULL = 1
    BUCKETS = 2


class AuthType(IntEnum):
    """Authentication schemes; the value is carried on the wire."""

    USERPASS = 1
    CB = 23


class MsgId(IntEnum):
    """Identifiers of the messages exchanged inside the secure session."""

    NOOP = 1
    PING = 2
    PONG = 3
    AUTH = 4
    DATA = 5
    CONFIG_IPV4 = 6
    AUTH_RESPONSE = 7
    AUTH_RESPONSE_WITH_CONFIG = 8
    GOODBYE = 10
    DEPRECATED_13 = 13
    EXTENSION = 14