import pytest

from helium.enums import ConnectionType
from helium.errors import HeError, ReturnCode, is_error_fatal

STREAM_NON_FATAL = [
    ReturnCode.SUCCESS,
    ReturnCode.ERR_SSL_ERROR_NONFATAL,
    ReturnCode.WANT_READ,
    ReturnCode.WANT_WRITE,
    ReturnCode.ERR_NOT_CONNECTED,
]

DATAGRAM_ONLY_NON_FATAL = [
    ReturnCode.ERR_INVALID_CONN_STATE,
    ReturnCode.ERR_EMPTY_PACKET,
    ReturnCode.ERR_PACKET_TOO_SMALL,
    ReturnCode.ERR_NOT_HE_PACKET,
    ReturnCode.ERR_UNSUPPORTED_PACKET_TYPE,
    ReturnCode.ERR_BAD_PACKET,
    ReturnCode.ERR_UNKNOWN_SESSION,
    ReturnCode.ERR_INCORRECT_PROTOCOL_VERSION,
]


@pytest.mark.parametrize("code", STREAM_NON_FATAL)
def test_stream_non_fatal(code):
    assert is_error_fatal(code, ConnectionType.STREAM) is False


@pytest.mark.parametrize("code", DATAGRAM_ONLY_NON_FATAL)
def test_packet_errors_fatal_on_stream(code):
    assert is_error_fatal(code, ConnectionType.STREAM) is True


@pytest.mark.parametrize("code", STREAM_NON_FATAL + DATAGRAM_ONLY_NON_FATAL)
def test_datagram_non_fatal(code):
    assert is_error_fatal(code, ConnectionType.DATAGRAM) is False


@pytest.mark.parametrize(
    "code",
    [ReturnCode.ERR_SSL_ERROR, ReturnCode.ERR_CONNECTION_WAS_CLOSED, ReturnCode.ERR_FAILED],
)
@pytest.mark.parametrize("connection_type", list(ConnectionType))
def test_hard_errors_are_fatal(code, connection_type):
    assert is_error_fatal(code, connection_type) is True


def test_accepts_exception_instance():
    assert is_error_fatal(HeError(ReturnCode.ERR_BAD_PACKET), ConnectionType.DATAGRAM) is False
    assert is_error_fatal(HeError(ReturnCode.ERR_BAD_PACKET), ConnectionType.STREAM) is True


def test_he_error_carries_code_and_message():
    err = HeError(ReturnCode.ERR_RNG_FAILURE, "rng broke")
    assert err.code is ReturnCode.ERR_RNG_FAILURE
    assert err.message == "rng broke"
    assert "ERR_RNG_FAILURE" in str(err)


def test_he_error_default_message_from_code():
    err = HeError(ReturnCode.ERR_EMPTY_STRING)
    assert err.message == ReturnCode.ERR_EMPTY_STRING.name.lower().replace("_", " ")


def test_he_error_coerces_int_code():
    err = HeError(int(ReturnCode.ERR_FAILED))
    assert err.code is ReturnCode.ERR_FAILED


def test_he_error_is_raisable():
    err = HeError(ReturnCode.ERR_NULL_POINTER)
    with pytest.raises(HeError, match="ERR_NULL_POINTER") as info:
        raise err
    assert info.value is err
    assert err.code is ReturnCode.ERR_NULL_POINTER