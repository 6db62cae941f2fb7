"""Serve a live wren App with the pounce ASGI server."""


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    workers: int = 1,
) -> None:
    """Start a pounce server with the given wren App.

    Pounce's ``run()`` takes an import string, but here we hold a live
    ``App`` object, so ``pounce.Server`` is driven directly with the
    ASGI callable.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=workers, reload=reload)
    Server(config, app).run()
