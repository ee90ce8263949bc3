"""A client that owns a secure context, a connection and its plugin chains."""

from typing import Any, Optional

from .conn import Conn
from .errors import HeError, ReturnCode


class Client:
    """Bundles the pieces needed to run one client connection.

    ``ssl_ctx`` is the shared secure context. It is handed to the connection
    and must also provide ``start()``, ``stop()`` and ``is_valid_client()``.
    Each of these raises HeError on failure.
    """

    def __init__(self, ssl_ctx, conn=None, inside_plugins=None, outside_plugins=None):
        if ssl_ctx is None:
            raise HeError(ReturnCode.ERR_INIT_FAILED, "a secure context is required")
        self.ssl_ctx: Optional[Any] = ssl_ctx
        self.conn: Optional[Conn] = conn if conn is not None else Conn()
        self.inside_plugins = inside_plugins if inside_plugins is not None else []
        self.outside_plugins = outside_plugins if outside_plugins is not None else []
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self):
        return self._closed

    def _check_open(self):
        if self._closed:
            raise HeError(ReturnCode.ERR_NULL_POINTER, "client is closed")

    def connect(self):
        """Start the secure context, then begin connecting to the server.

        Connecting is asynchronous: when this returns the handshake is only
        under way. Watch state changes on the connection to follow it.
        """
        self._check_open()
        self.ssl_ctx.start()
        self.conn.client_connect(self.ssl_ctx, self.inside_plugins, self.outside_plugins)

    def disconnect(self):
        """Stop the secure context and begin a clean disconnect."""
        self._check_open()
        self.ssl_ctx.stop()
        self.conn.disconnect()

    def is_config_valid(self):
        """Raise HeError unless the context and connection are ready to connect."""
        self._check_open()
        self.ssl_ctx.is_valid_client()
        self.conn.is_valid_client(self.ssl_ctx)

    def close(self):
        """Release the connection, context and plugin chains; safe to call twice."""
        if self._closed:
            return
        self._closed = True
        if self.conn is not None:
            self.conn.tls = None
        ctx_close = getattr(self.ssl_ctx, "close", None)
        if callable(ctx_close):
            ctx_close()
        self.conn = None
        self.ssl_ctx = None
        self.inside_plugins = None
        self.outside_plugins = None