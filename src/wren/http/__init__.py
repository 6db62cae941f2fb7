"""HTTP primitives — immutable Request, Response, Headers, QueryParams."""

from wren.http.headers import Headers
from wren.http.query import QueryParams
from wren.http.request import Request
from wren.http.response import Response, json_response

__all__ = ["Headers", "QueryParams", "Request", "Response", "json_response"]
