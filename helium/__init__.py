"""Connection and client state machine for the Helium VPN protocol."""

__version__ = "0.1.0"

__all__ = ["client", "config", "conn", "core", "enums", "errors", "messages"]