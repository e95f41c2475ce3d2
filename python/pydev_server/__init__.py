"""
pydev_server - stdio front-end of the pydev editor bridge.

    commands/      -> command registry and request handlers
    dispatcher.py  -> request routing and error conversion
    context.py     -> state shared by handlers
    server.py      -> request loop and shutdown
    config.py      -> configuration defaults from the environment
    cli.py         -> argparse entry point
"""

from .cli import main  # noqa: F401
from .server import DevServer  # noqa: F401

__all__ = ["DevServer", "main"]

__version__ = "0.1.0"
