import pytest

from helium.core import StreamState
from helium.errors import HeError, ReturnCode


def test_setup_overwrite_with_unread_data_fails():
    state = StreamState()
    state.setup(bytes(42))
    assert state.left_to_read == 42
    with pytest.raises(HeError) as info:
        state.setup(b"\x00" * 10)
    assert info.value.code is ReturnCode.ERR_SSL_ERROR


def test_setup_initialises_counters():
    data = b"\x45\x00\x00\x14abcdefgh"
    state = StreamState()
    state.setup(data)
    assert state.incoming_data == data
    assert state.incoming_data_length == len(data)
    assert state.read_offset == 0
    assert state.left_to_read == len(data)


def test_read_consumes_in_order():
    state = StreamState()
    state.setup(b"abcdef")
    assert state.read(4) == b"abcd"
    assert state.left_to_read == 2
    assert state.read(4) == b"ef"
    assert state.left_to_read == 0
    assert state.read(4) == b""


def test_setup_allowed_after_full_read():
    state = StreamState()
    state.setup(b"xyz")
    state.read(3)
    state.setup(b"next")
    assert state.read(10) == b"next"


def test_read_negative_size_rejected():
    state = StreamState()
    state.setup(b"abc")
    with pytest.raises(ValueError):
        state.read(-1)


def test_empty_state_reads_nothing():
    state = StreamState()
    assert state.left_to_read == 0
    assert state.read(5) == b""