"""A single secure connection: configuration, lifecycle and control messages."""

import contextlib
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from . import messages
from .config import validate_config_int, validate_config_string
from .core import StreamState
from .enums import AuthType, ConnEvent, ConnState, ConnectionType, PaddingType
from .errors import HeError, ReturnCode, is_error_fatal

# One second of TLS timeout is scaled to these many milliseconds.
TIMEOUT_MULTIPLIER = 100
RENEGOTIATION_TIMEOUT_MULTIPLIER = 1000

WOLF_MAX_HEADER_SIZE = 37
_IPV4_HEADER_SIZE = 20
_UDP_HEADER_SIZE = 8
_WIRE_HEADER_SIZE = 16
PACKET_OVERHEAD = _IPV4_HEADER_SIZE + _UDP_HEADER_SIZE + _WIRE_HEADER_SIZE + WOLF_MAX_HEADER_SIZE

MAXIMUM_PROTOCOL_VERSION = (1, 1)
SUPPORTED_PROTOCOL_VERSIONS = frozenset({(1, 0), (1, 1)})

_SESSION_ID_SIZE = 8

_CALLBACKS = (
    "state_change_cb",
    "nudge_time_cb",
    "inside_write_cb",
    "outside_write_cb",
    "network_config_ipv4_cb",
    "event_cb",
    "auth_cb",
    "auth_buf_cb",
    "populate_network_config_ipv4_cb",
)

_TLS_WANT = ()


class TlsWantRead(Exception):
    """The TLS layer needs more incoming data before it can continue."""


class TlsWantWrite(Exception):
    """The TLS layer needs to write before it can continue."""


_TLS_WANT = (TlsWantRead, TlsWantWrite)


class TlsSession(Protocol):
    """The non-blocking TLS/DTLS session a connection drives.

    Operations that cannot finish yet raise TlsWantRead or TlsWantWrite;
    any other failure is reported as an OSError.
    """

    def set_mtu(self, mtu: int) -> bool:
        """Set the datagram MTU; return False if the size is unacceptable."""
        ...

    def check_domain_name(self, name: str) -> bool:
        """Require the peer certificate to match ``name``."""
        ...

    def negotiate(self) -> None:
        """Advance the handshake."""
        ...

    def write(self, data: bytes) -> int:
        """Send application data; return 0 if the peer closed the session."""
        ...

    def shutdown(self) -> None:
        """Close the session politely."""
        ...

    def supports_secure_renegotiation(self) -> bool:
        """Return True if the peer supports secure renegotiation."""
        ...

    def rehandshake(self) -> None:
        """Start a secure renegotiation."""
        ...

    def update_keys(self) -> None:
        """Rotate the traffic keys of a stream session."""
        ...

    def current_timeout(self) -> int:
        """Return the current retransmission timeout in seconds."""
        ...

    def got_timeout(self) -> None:
        """Tell the session that its timeout has fired."""
        ...


@dataclass
class TlsContext:
    """Settings shared by every connection created from one context."""

    session_factory: Optional[Callable[["Conn"], Optional[TlsSession]]] = None
    connection_type: ConnectionType = ConnectionType.DATAGRAM
    padding_type: PaddingType = PaddingType.NONE
    disable_roaming_connections: bool = False
    use_aggressive_mode: bool = False
    maximum_supported_version: tuple = MAXIMUM_PROTOCOL_VERSION
    supported_versions: frozenset = field(default_factory=lambda: SUPPORTED_PROTOCOL_VERSIONS)
    server_dn: Optional[str] = None
    random_bytes: Callable[[int], bytes] = os.urandom
    state_change_cb: Optional[Callable] = None
    nudge_time_cb: Optional[Callable] = None
    inside_write_cb: Optional[Callable] = None
    outside_write_cb: Optional[Callable] = None
    network_config_ipv4_cb: Optional[Callable] = None
    event_cb: Optional[Callable] = None
    auth_cb: Optional[Callable] = None
    auth_buf_cb: Optional[Callable] = None
    populate_network_config_ipv4_cb: Optional[Callable] = None


class Conn:
    """One connection between a client and a server."""

    def __init__(self):
        self.state = ConnState.NONE
        self.connection_type = ConnectionType.DATAGRAM
        self.padding_type = PaddingType.NONE
        self.disable_roaming_connections = False
        self.use_aggressive_mode = False
        self.protocol_version = (0, 0)
        self.auth_type: Optional[AuthType] = None
        self.auth_buffer = b""
        self.is_server = False
        self.pending_session_id = 0
        self.renegotiation_due = False
        self.renegotiation_in_progress = False
        self.tls_timeout = 0
        self.is_nudge_timer_running = False
        self.context: Any = None
        self.tls: Optional[TlsSession] = None
        self.inside_plugins = None
        self.outside_plugins = None
        self.stream = StreamState()
        self.random_bytes = os.urandom
        self._username = ""
        self._password = ""
        self._outside_mtu = 0
        self._session_id = 0
        for name in _CALLBACKS:
            setattr(self, name, None)

    # Configuration

    @property
    def username(self):
        return self._username

    @username.setter
    def username(self, value):
        self.auth_type = AuthType.USERPASS
        self._username = validate_config_string(value)

    @property
    def password(self):
        return self._password

    @password.setter
    def password(self, value):
        self.auth_type = AuthType.USERPASS
        self._password = validate_config_string(value)

    @property
    def outside_mtu(self):
        return self._outside_mtu

    @outside_mtu.setter
    def outside_mtu(self, value):
        self._outside_mtu = validate_config_int(value)

    @property
    def session_id(self):
        return self._session_id

    @session_id.setter
    def session_id(self, value):
        if self._session_id != 0:
            raise HeError(ReturnCode.ERR_INVALID_CONN_STATE, "session id already set")
        self._session_id = value

    @property
    def nudge_time(self):
        """Milliseconds until the host should call nudge(), or 0 if none is needed."""
        if self.state is ConnState.ONLINE and not self.renegotiation_in_progress:
            return 0
        return self.tls_timeout

    @property
    def supports_renegotiation(self):
        return self.tls is not None and bool(self.tls.supports_secure_renegotiation())

    def set_protocol_version(self, major, minor):
        """Pin the wire protocol version this connection will use."""
        if not (0 <= major <= 0xFF and 0 <= minor <= 0xFF):
            raise ValueError("protocol version parts must fit in one byte")
        self.protocol_version = (major, minor)

    def set_auth_buffer(self, buffer):
        """Authenticate with an opaque buffer instead of a username and password."""
        if buffer is None:
            raise HeError(ReturnCode.ERR_NULL_POINTER)
        buffer = bytes(buffer)
        if not buffer:
            raise HeError(ReturnCode.ERR_EMPTY_STRING)
        if len(buffer) > messages.MAX_AUTH_BUFFER_LENGTH:
            raise HeError(ReturnCode.ERR_STRING_TOO_LONG)
        self.auth_type = AuthType.CB
        self.auth_buffer = buffer

    def is_error_fatal(self, code):
        """Return True if ``code`` should end this connection."""
        return is_error_fatal(code, self.connection_type)

    def data_packet_length(self, length):
        """Return the padded length of a data packet under this connection's padding."""
        return messages.data_packet_length(self.padding_type, length)

    # Validation

    def is_valid_client(self, ctx):
        """Raise HeError unless the connection is configured well enough to act as a client."""
        if not self.auth_buffer:
            if not self._username:
                raise HeError(ReturnCode.ERR_CONF_USERNAME_NOT_SET)
            if not self._password:
                raise HeError(ReturnCode.ERR_CONF_PASSWORD_NOT_SET)
        elif self._username:
            raise HeError(ReturnCode.ERR_CONF_CONFLICTING_AUTH_METHODS)
        if not self._outside_mtu:
            raise HeError(ReturnCode.ERR_CONF_MTU_NOT_SET)
        major, minor = self.protocol_version
        if major != 0 and (major, minor) != tuple(ctx.maximum_supported_version):
            raise HeError(ReturnCode.ERR_INCORRECT_PROTOCOL_VERSION)

    def is_valid_server(self, ctx):
        """Raise HeError unless the connection is configured well enough to act as a server."""
        if not self._outside_mtu:
            raise HeError(ReturnCode.ERR_CONF_MTU_NOT_SET)
        major, minor = self.protocol_version
        if major != 0 and (major, minor) not in ctx.supported_versions:
            raise HeError(ReturnCode.ERR_INCORRECT_PROTOCOL_VERSION)

    # Lifecycle

    def configure(self, ctx):
        """Copy the shared settings and callbacks of ``ctx`` into this connection."""
        self.disable_roaming_connections = ctx.disable_roaming_connections
        self.padding_type = ctx.padding_type
        self.use_aggressive_mode = ctx.use_aggressive_mode
        self.connection_type = ctx.connection_type
        if self.protocol_version[0] == 0:
            self.protocol_version = tuple(ctx.maximum_supported_version)
        for name in _CALLBACKS:
            setattr(self, name, getattr(ctx, name))
        self.random_bytes = ctx.random_bytes

    def _connect(self, ctx, inside_plugins, outside_plugins):
        self.configure(ctx)
        self.inside_plugins = inside_plugins
        self.outside_plugins = outside_plugins

        session = ctx.session_factory(self) if ctx.session_factory else None
        if session is None:
            raise HeError(ReturnCode.ERR_INIT_FAILED, "could not create TLS session")
        self.tls = session

        if ctx.connection_type is ConnectionType.DATAGRAM:
            mtu = self._outside_mtu - PACKET_OVERHEAD + WOLF_MAX_HEADER_SIZE
            if not session.set_mtu(mtu):
                raise HeError(ReturnCode.ERR_INVALID_MTU_SIZE)

        if ctx.server_dn:
            if not session.check_domain_name(ctx.server_dn):
                raise HeError(ReturnCode.ERR_INIT_FAILED, "could not set server name check")

        self.change_state(ConnState.CONNECTING)
        try:
            session.negotiate()
        except _TLS_WANT:
            # Non-blocking handshakes always need more data at this point.
            self.change_state(ConnState.CONNECTING)
            self.update_timeout()
        except OSError as exc:
            raise HeError(ReturnCode.ERR_CONNECT_FAILED) from exc
        else:
            self.change_state(ConnState.LINK_UP)
            self.update_timeout()

    def client_connect(self, ctx, inside_plugins, outside_plugins):
        """Start connecting as a client; completion is signalled through state changes."""
        if ctx is None:
            raise HeError(ReturnCode.ERR_NULL_POINTER)
        self.is_valid_client(ctx)
        try:
            self._connect(ctx, inside_plugins, outside_plugins)
        finally:
            self.is_server = False

    def server_connect(self, ctx, inside_plugins, outside_plugins):
        """Start accepting as a server and assign a fresh session id."""
        if ctx is None:
            raise HeError(ReturnCode.ERR_NULL_POINTER)
        self.is_valid_server(ctx)
        try:
            self._connect(ctx, inside_plugins, outside_plugins)
        finally:
            self.is_server = True
        # Generated even when roaming is disabled; it is then simply not sent.
        self._session_id = self.generate_session_id()

    def disconnect(self):
        """Say goodbye, shut the session down and move to DISCONNECTED."""
        if self.tls is None:
            raise HeError(ReturnCode.ERR_NEVER_CONNECTED)
        if self.state in (
            ConnState.DISCONNECTING,
            ConnState.NONE,
            ConnState.CONNECTING,
            ConnState.DISCONNECTED,
        ):
            raise HeError(ReturnCode.ERR_INVALID_CONN_STATE)

        self.change_state(ConnState.DISCONNECTING)
        self.send_goodbye()
        # The session is about to be dropped; shutdown is a courtesy only.
        with contextlib.suppress(OSError, *_TLS_WANT):
            self.tls.shutdown()
        self.inside_write_cb = None
        self.outside_write_cb = None
        self.tls_timeout = 0
        self.change_state(ConnState.DISCONNECTED)

    def change_state(self, state):
        """Move to ``state``, notify the host and react to the new state."""
        if self.state is state:
            return
        self.state = state
        if self.state_change_cb:
            self.state_change_cb(self, state, self.context)
        if state is ConnState.LINK_UP and not self.is_server:
            with contextlib.suppress(HeError):
                self.send_auth()

    # Messages

    def send_message(self, message):
        """Write one message into the secure session."""
        if self.tls is None:
            raise HeError(ReturnCode.ERR_NEVER_CONNECTED)
        try:
            written = self.tls.write(bytes(message))
        except TlsWantWrite as exc:
            raise HeError(ReturnCode.WANT_WRITE) from exc
        except TlsWantRead as exc:
            raise HeError(ReturnCode.WANT_READ) from exc
        except OSError as exc:
            raise HeError(ReturnCode.ERR_SSL_ERROR) from exc
        if written == 0:
            raise HeError(ReturnCode.ERR_CONNECTION_WAS_CLOSED)

    def send_goodbye(self):
        """Tell the peer we are leaving; delivery is not checked."""
        with contextlib.suppress(HeError):
            self.send_message(messages.encode_goodbye())

    def send_keepalive(self):
        """Send a ping; only allowed while online."""
        if self.state is not ConnState.ONLINE:
            raise HeError(ReturnCode.ERR_INVALID_CONN_STATE)
        self.send_message(messages.encode_ping())

    def send_auth(self):
        """Send (or resend) the authentication request."""
        if self.state not in (ConnState.LINK_UP, ConnState.AUTHENTICATING):
            raise HeError(ReturnCode.ERR_INVALID_CONN_STATE)
        self.change_state(ConnState.AUTHENTICATING)
        if self.auth_type is AuthType.USERPASS:
            self.send_message(messages.encode_auth_userpass(self._username, self._password))
        elif self.auth_type is AuthType.CB:
            self.send_message(messages.encode_auth_buffer(self.auth_type, self.auth_buffer))
        else:
            raise HeError(ReturnCode.ERR_INVALID_AUTH_TYPE)

    # Renegotiation and timers

    def schedule_renegotiation(self):
        """Ask for a renegotiation at the next opportunity."""
        self.renegotiation_due = True

    def renegotiate(self):
        """Renegotiate the session, or rotate keys on streams without renegotiation."""
        self.renegotiation_due = False
        if self.renegotiation_in_progress or self.state is not ConnState.ONLINE:
            return

        starting = self.tls.supports_secure_renegotiation()
        if starting:
            action = self.tls.rehandshake
        elif self.connection_type is ConnectionType.STREAM:
            action = self.tls.update_keys
        else:
            return

        pending = False
        failure = None
        try:
            action()
        except _TLS_WANT:
            pending = True
        except OSError as exc:
            failure = exc

        if starting:
            self.renegotiation_in_progress = True
            self.generate_event(ConnEvent.SECURE_RENEGOTIATION_STARTED)

        if failure is not None:
            raise HeError(ReturnCode.ERR_SSL_ERROR) from failure
        if pending:
            self.update_timeout()

    def update_timeout(self):
        """Refresh the handshake timer and ask the host to start one if none is running."""
        if self.state is ConnState.ONLINE and not self.renegotiation_in_progress:
            return
        multiplier = (
            RENEGOTIATION_TIMEOUT_MULTIPLIER
            if self.renegotiation_in_progress
            else TIMEOUT_MULTIPLIER
        )
        self.tls_timeout = self.tls.current_timeout() * multiplier
        if self.nudge_time_cb and not self.is_nudge_timer_running:
            self.nudge_time_cb(self, self.tls_timeout, self.context)
            self.is_nudge_timer_running = True

    def nudge(self):
        """Handle an expired timer: resend auth or let the TLS layer retransmit."""
        self.is_nudge_timer_running = False
        if self.state is ConnState.AUTHENTICATING:
            with contextlib.suppress(HeError):
                self.send_auth()
        else:
            try:
                self.tls.got_timeout()
            except _TLS_WANT:
                pass
            except OSError as exc:
                self.change_state(ConnState.DISCONNECTED)
                raise HeError(ReturnCode.CONNECTION_TIMED_OUT) from exc
        self.update_timeout()

    # Events and sessions

    def generate_event(self, event):
        """Report ``event`` to the host if it listens."""
        if self.event_cb:
            self.event_cb(self, event, self.context)

    def generate_session_id(self):
        """Return a random 64-bit session id."""
        try:
            raw = self.random_bytes(_SESSION_ID_SIZE)
        except (OSError, ValueError, NotImplementedError) as exc:
            raise HeError(ReturnCode.ERR_RNG_FAILURE) from exc
        if raw is None or len(raw) != _SESSION_ID_SIZE:
            raise HeError(ReturnCode.ERR_RNG_FAILURE)
        return int.from_bytes(raw, "little")

    def rotate_session_id(self):
        """Server side: prepare a new session id and return it."""
        if not self.is_server or self.pending_session_id != 0:
            raise HeError(ReturnCode.ERR_INVALID_CONN_STATE)
        new_session_id = self.generate_session_id()
        self.pending_session_id = new_session_id
        return new_session_id