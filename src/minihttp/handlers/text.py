"""
Plain-text routes: index, echo and user-agent.

    GET /                 → 200, no headers, no body
    GET /echo/<text>      → 200, text/plain, body = <text>
    GET /user-agent       → 200, text/plain, body = User-Agent value

Method is ignored on all three.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, empty, status_only
from ..http.router import Route
from ..http.status_codes import HTTPStatus


TEXT_PLAIN = "text/plain"


def index(request: HTTPRequest) -> HTTPResponse:
    """Bare 200: status line, blank line, nothing else."""
    return status_only(HTTPStatus.OK)


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Echo whatever follows "/echo/" in the target, verbatim.

    No URL-decoding; "/echo/a%20b" answers "a%20b".
    """
    return ok(Route.ECHO.parameter(request.target), TEXT_PLAIN)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    Echo the User-Agent header value.

    Without the header there is nothing to answer with and the empty
    descriptor goes back (rendered as a lone blank line).
    """
    agent = request.user_agent
    if agent is None:
        return empty()
    return ok(agent, TEXT_PLAIN)
