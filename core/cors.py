"""
CORS handling for browser clients.

Preflight requests are always answered with an empty 200; the
Access-Control-Allow-* headers tell the browser what is permitted.
"""

from fastapi import Response, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers

_BODY_HEADERS = {"content-length", "content-type"}


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose preflight answer is an empty 200."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        headers = {
            key: value
            for key, value in response.headers.items()
            if key.lower() not in _BODY_HEADERS
        }
        return Response(status_code=status.HTTP_200_OK, headers=headers)
