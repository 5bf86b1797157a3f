"""Nova: a rule-based chat server and its conversation client.

This package provides a FastAPI application factory named ``create_app``
(see :mod:`nova_chat.server`) and a client-side :class:`ChatSession`
(see :mod:`nova_chat.session`).

Typical usage
-------------
from nova_chat import create_app
app = create_app()

or, from the provided launcher:

python scripts/run_server.py --host 127.0.0.1 --port 8000
"""

from __future__ import annotations

__all__ = ["create_app", "ChatSession", "Responder", "__version__", "get_version"]

# ---------------------------------------------------------------------
# Version handling
# ---------------------------------------------------------------------
__version__ = "0.1.0"

def get_version() -> str:
    """Return the package version."""
    return __version__

# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------
from .responder import Responder  # noqa: E402
from .server import create_app  # noqa: E402
from .session import ChatSession  # noqa: E402
