"""
=============================================================================
FILES ROUTE
=============================================================================

Reads and writes named files under a root directory supplied at startup
(the --directory option).

    GET  /files/<name>   → 200 application/octet-stream + file bytes
    POST /files/<name>   → 201, request body written to <root>/<name>
    anything else        → empty descriptor

=============================================================================
FAILURE MAPPING
=============================================================================

Every filesystem failure collapses into the same bare 404:

    ┌────────────────────────────────┬──────────────────────────────────┐
    │  Failure                       │  Client sees                     │
    ├────────────────────────────────┼──────────────────────────────────┤
    │  file missing                  │  404                             │
    │  permission denied             │  404                             │
    │  name is a directory           │  404                             │
    │  parent directory missing      │  404  (POST does not mkdir)      │
    │  no root configured            │  404                             │
    │  name escapes the root (../)   │  404                             │
    └────────────────────────────────┴──────────────────────────────────┘

The cause only shows up in the DEBUG log. Nothing is retried.

=============================================================================
CONCURRENCY
=============================================================================

Two POSTs to the same name race; the last write wins. There is no lock
and no atomic rename, the filesystem is the only shared state.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, created, not_found, empty
from ..http.router import Route


logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"


class FileAccessError(Exception):
    """A file under the root could not be read or written."""


class FileHandler:
    """
    Handler for /files/<name>.

    Usage:
        files = FileHandler("/tmp/data")
        router.add_route(Route.FILES, files.handle)

    The root is not checked at construction time. A missing or unusable
    root shows up as 404s on every request, same as a missing file.
    """

    def __init__(self, root_dir: Optional[str]):
        """
        Args:
            root_dir: Directory files are read from and written to.
                      None disables the route (every request gets 404).
        """
        self.root_dir = Path(root_dir).resolve() if root_dir else None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch on method; GET reads, POST writes."""
        name = Route.FILES.parameter(request.target)

        if request.method == "GET":
            operation = self.read
        elif request.method == "POST":
            operation = self.write
        else:
            return empty()

        try:
            return operation(name, request)
        except FileAccessError as e:
            logger.debug(f"{request.method} {request.target}: {e}")
            return not_found()

    def read(self, name: str, request: HTTPRequest) -> HTTPResponse:
        """Serve the whole file."""
        path = self.resolve(name)
        try:
            content = path.read_bytes()
        except (OSError, ValueError) as e:
            raise FileAccessError(f"cannot read {path}: {e}") from e
        return ok(content, OCTET_STREAM)

    def write(self, name: str, request: HTTPRequest) -> HTTPResponse:
        """Create or overwrite the file with the request body."""
        path = self.resolve(name)
        try:
            path.write_bytes(request.body)
        except (OSError, ValueError) as e:
            raise FileAccessError(f"cannot write {path}: {e}") from e
        return created()

    def resolve(self, name: str) -> Path:
        """
        <root>/<name>, refusing anything that lands outside the root.

        resolve() follows symlinks and collapses "..", so the containment
        check runs on the real location.
        """
        if self.root_dir is None:
            raise FileAccessError("no files directory configured")
        try:
            path = (self.root_dir / name).resolve()
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL byte in the name
            raise FileAccessError(f"invalid name {name!r}: {e}") from e
        try:
            path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name!r}")
            raise FileAccessError(f"{name!r} is outside {self.root_dir}")
        return path
