"""
Scrol Backend — CORS Middleware
================================

What:  Stamps the configured CORS header map on every response and answers
       preflight requests.
How:   OPTIONS on any path returns 204 with the headers and an empty body;
       any other request passes through and gets the headers added.

The header map is read from settings.cors_headers, which is immutable.
Clients send bare OPTIONS preflights without Origin or
Access-Control-Request-Method; every one of them gets the 204.
"""

from typing import Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from scrol.config import settings


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Answer OPTIONS with 204 and add the CORS map to all other responses."""

    def __init__(self, app: ASGIApp, headers: Optional[Mapping[str, str]] = None):
        super().__init__(app)
        self.headers = headers if headers is not None else settings.cors_headers

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=dict(self.headers))

        response = await call_next(request)
        response.headers.update(self.headers)
        return response
