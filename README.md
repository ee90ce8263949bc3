# helium

Connection and client state machine for the Helium VPN protocol.

The package models one side of a Helium session: configuration checks,
connection states, authentication messages, keepalives, session
identifiers, renegotiation scheduling and handshake timers. The TLS layer
itself is supplied by you, through the `TlsSession` protocol and the
`TlsContext` settings in `helium.conn`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

- `helium.enums`: connection states (`ConnState`), events (`ConnEvent`),
  connection types (`ConnectionType`), padding modes (`PaddingType`),
  authentication types (`AuthType`) and message identifiers (`MsgId`).
- `helium.errors`: the `ReturnCode` enumeration, the `HeError` exception
  and `is_error_fatal(code, connection_type)`, which decides whether an
  error should end a connection. Datagram connections tolerate more errors
  (stray, repeated or malformed packets) than stream connections.
- `helium.config`: validation of configuration strings (non-empty, at most
  50 characters; 49 are kept) and integers (not negative).
- `helium.core`: `StreamState`, which holds a buffer of incoming stream
  data; `setup(data)` starts a new buffer and refuses while the previous
  one is unread, `read(size)` consumes from it.
- `helium.messages`: `encode_goodbye`, `encode_ping`,
  `encode_auth_userpass`, `encode_auth_buffer` and `data_packet_length`.
- `helium.conn`: the `Conn` connection object, `TlsContext`, the
  `TlsSession` protocol and the `TlsWantRead` / `TlsWantWrite` exceptions a
  session raises when it cannot finish yet.
- `helium.client`: `Client`, which bundles a secure context, a connection
  and the inside and outside plugin chains.

## Errors

Operations that fail raise `HeError`, whose `code` attribute is a
`ReturnCode`:

```python
from helium.errors import HeError, ReturnCode
from helium.config import validate_config_string

try:
    validate_config_string("")
except HeError as exc:
    assert exc.code is ReturnCode.ERR_EMPTY_STRING
```

## Configuring a connection

```python
from helium.conn import Conn, TlsContext

conn = Conn()
conn.username = "user"
conn.password = "password"
conn.outside_mtu = 1500
conn.is_valid_client(TlsContext())  # raises HeError if something is missing
```

Setting a username or password selects username/password authentication;
`set_auth_buffer(buffer)` selects buffer authentication instead. Having
both an auth buffer and a username is rejected with
`ERR_CONF_CONFLICTING_AUTH_METHODS`.

## Connecting

`Conn.client_connect(ctx, inside_plugins, outside_plugins)` and
`Conn.server_connect(...)` copy the settings and callbacks of a
`TlsContext`, create a session through `ctx.session_factory(conn)`, set the
datagram MTU, optionally require `ctx.server_dn`, and start the handshake.
Completion is reported through `state_change_cb`; when the link comes up a
client sends its authentication request. `nudge_time` tells the host how
many milliseconds to wait before calling `nudge()`, which resends the
authentication request or lets the TLS layer retransmit.

Online connections can send a ping with `send_keepalive()`, ask for a
renegotiation with `schedule_renegotiation()` / `renegotiate()`, and leave
with `disconnect()`. Servers get a random session id on connect and can
prepare a new one with `rotate_session_id()`.

## Padding

`data_packet_length` rounds a payload length up according to the padding
mode, hiding the true size of the traffic:

```python
from helium.enums import PaddingType
from helium.messages import data_packet_length

data_packet_length(PaddingType.NONE, 100)     # 100
data_packet_length(PaddingType.BUCKETS, 100)  # 450
data_packet_length(PaddingType.FULL, 100)     # 1350
```

## Clients

`Client(ssl_ctx, conn=None, inside_plugins=None, outside_plugins=None)`
takes a secure context that works as a `TlsContext` and also provides
`start()`, `stop()` and `is_valid_client()`. `connect()`, `disconnect()`
and `is_config_valid()` call the context first and then the connection,
raising `HeError` on the first failure. `close()` releases everything and
may be called twice; the client also works as a context manager.

## What this package does not do

- It contains no TLS or DTLS implementation and no concrete secure context;
  you provide the session and the `start`/`stop`/`is_valid_client` methods.
- It does not process data packets: nothing here reads from the TLS
  session, decodes incoming messages, or moves packets between the tunnel
  and the network.
- Plugin chains are only stored on the connection; they are never run.
- There is no command-line program and no server loop.