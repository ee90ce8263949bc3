"""Result codes, the exception that carries them, and fatality rules."""

from enum import IntEnum

from .enums import ConnectionType


class ReturnCode(IntEnum):
    """Outcome codes; every non-success code can travel inside a HeError."""

    SUCCESS = 0
    ERR_NULL_POINTER = -1
    ERR_STRING_TOO_LONG = -2
    ERR_EMPTY_STRING = -3
    ERR_INVALID_CONN_STATE = -4
    ERR_NOT_CONNECTED = -5
    ERR_EMPTY_PACKET = -6
    ERR_PACKET_TOO_SMALL = -7
    ERR_NOT_HE_PACKET = -8
    ERR_UNSUPPORTED_PACKET_TYPE = -9
    ERR_BAD_PACKET = -10
    ERR_UNKNOWN_SESSION = -11
    ERR_INCORRECT_PROTOCOL_VERSION = -12
    ERR_SSL_ERROR = -13
    ERR_SSL_ERROR_NONFATAL = -14
    ERR_NEGATIVE_NUMBER = -15
    ERR_CONF_USERNAME_NOT_SET = -16
    ERR_CONF_PASSWORD_NOT_SET = -17
    ERR_CONF_CONFLICTING_AUTH_METHODS = -18
    ERR_CONF_MTU_NOT_SET = -19
    ERR_CONF_CA_NOT_SET = -20
    ERR_CONF_OUTSIDE_WRITE_CB_NOT_SET = -21
    ERR_INIT_FAILED = -22
    ERR_INVALID_MTU_SIZE = -23
    ERR_CONNECT_FAILED = -24
    ERR_NEVER_CONNECTED = -25
    ERR_CONNECTION_WAS_CLOSED = -26
    ERR_INVALID_AUTH_TYPE = -27
    ERR_RNG_FAILURE = -28
    ERR_FAILED = -29
    ERR_PLUGIN_DROP = -30
    ERR_PACKET_TOO_LARGE = -31
    ERR_REJECTED_SESSION = -32
    ERR_SERVER_DN_MISMATCH = -33
    ERR_CANNOT_VERIFY_SERVER_CERT = -34
    CONNECTION_TIMED_OUT = -35
    WANT_READ = -36
    WANT_WRITE = -37


class HeError(Exception):
    """Raised when an operation fails; ``code`` names the failure."""

    def __init__(self, code, message=None):
        self.code = ReturnCode(code)
        self.message = message or self.code.name.lower().replace("_", " ")
        super().__init__(self.message)

    def __str__(self):
        return f"{self.code.name}: {self.message}"


_STREAM_NON_FATAL = frozenset(
    {
        ReturnCode.SUCCESS,
        ReturnCode.ERR_SSL_ERROR_NONFATAL,
        ReturnCode.WANT_READ,
        ReturnCode.WANT_WRITE,
        ReturnCode.ERR_NOT_CONNECTED,
    }
)

# Datagram transports tolerate stray, repeated or out-of-order packets.
_DATAGRAM_NON_FATAL = _STREAM_NON_FATAL | frozenset(
    {
        ReturnCode.ERR_INVALID_CONN_STATE,
        ReturnCode.ERR_EMPTY_PACKET,
        ReturnCode.ERR_PACKET_TOO_SMALL,
        ReturnCode.ERR_NOT_HE_PACKET,
        ReturnCode.ERR_UNSUPPORTED_PACKET_TYPE,
        ReturnCode.ERR_BAD_PACKET,
        ReturnCode.ERR_UNKNOWN_SESSION,
        ReturnCode.ERR_INCORRECT_PROTOCOL_VERSION,
    }
)


def is_error_fatal(code, connection_type):
    """Return True if ``code`` should end a connection of the given type."""
    if isinstance(code, HeError):
        code = code.code
    code = ReturnCode(code)
    if connection_type is ConnectionType.STREAM:
        return code not in _STREAM_NON_FATAL
    return code not in _DATAGRAM_NON_FATAL