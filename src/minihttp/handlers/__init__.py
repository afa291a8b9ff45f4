"""
=============================================================================
ROUTE HANDLERS
=============================================================================

One handler per Route. Each takes an HTTPRequest and returns an
HTTPResponse descriptor; none of them touch the socket.

    Route.INDEX       → index()            text.py
    Route.ECHO        → echo()             text.py
    Route.USER_AGENT  → user_agent()       text.py
    Route.FILES       → FileHandler.handle files.py

=============================================================================
"""

from .text import index, echo, user_agent
from .files import FileHandler, FileAccessError

__all__ = [
    "index",
    "echo",
    "user_agent",
    "FileHandler",
    "FileAccessError",
]
