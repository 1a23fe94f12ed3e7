"""uvicorn server construction for the bot's HTTP surfaces."""

import socket

import uvicorn
from fastapi import FastAPI

from messaging.exceptions import ConfigurationError


def build_server(app: FastAPI, port: int, host: str = "0.0.0.0") -> uvicorn.Server:
    """Build a uvicorn server whose logging goes through loguru's intercept."""
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_config=None,
        access_log=False,
    )
    return uvicorn.Server(config)


def listen(port: int, host: str = "0.0.0.0") -> socket.socket:
    """Bind the listening socket up front.

    uvicorn exits the process when its own bind fails, so callers bind here
    and pass the socket to ``Server.serve(sockets=[...])``.

    Raises:
        ConfigurationError: if the address cannot be bound
    """
    try:
        return socket.create_server((host, port))
    except OSError as e:
        raise ConfigurationError(f"cannot listen on {host}:{port}: {e}") from e
