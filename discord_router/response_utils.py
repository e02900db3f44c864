"""Response utilities."""
import json
from typing import Any

from flask import Response


def json_response(data: Any, status: int = 200) -> Response:
    """Build a JSON response without requiring a Flask app context."""
    return Response(json.dumps(data), status=status, mimetype='application/json')


def text_response(text: str, status: int = 200) -> Response:
    return Response(text, status=status, mimetype='text/plain')


def to_response(result: Any) -> Response:
    """Convert a handler result into a Response.

    Accepts a Response (returned as is), a ``(body, status)`` tuple or any
    JSON-serializable value.
    """
    if isinstance(result, Response):
        return result
    if isinstance(result, tuple):
        body, status = result[0], result[1]
        if isinstance(body, Response):
            body.status_code = status
            return body
        return json_response(body, status)
    return json_response(result)
