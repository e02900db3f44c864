"""Request correlation and logging for Functions Framework entry points."""
import time
from functools import wraps
from typing import Callable

from flask import Response

from .observability import get_correlation_id


def with_correlation(logger):
    """Decorator that tags a request with a correlation ID and logs its lifecycle.

    The wrapped handler receives the request as its first argument; the
    correlation ID is available as ``request.correlation_id`` and is echoed
    back in the ``X-Correlation-ID`` response header.

    Usage:
        @with_correlation(logger)
        def discord_interactions(request):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(request, *args, **kwargs):
            correlation_id = get_correlation_id(request)
            request.correlation_id = correlation_id
            start_time = time.time()

            logger.info(
                "Request started",
                correlation_id=correlation_id,
                method=request.method,
                path=request.path,
                user_agent=request.headers.get('User-Agent', ''),
                remote_addr=request.headers.get('X-Forwarded-For', '').split(',')[0]
            )

            try:
                response = func(request, *args, **kwargs)
            except Exception as e:
                duration_ms = (time.time() - start_time) * 1000
                logger.error(
                    "Request failed",
                    error=e,
                    correlation_id=correlation_id,
                    method=request.method,
                    path=request.path,
                    duration_ms=round(duration_ms, 2)
                )
                raise

            duration_ms = (time.time() - start_time) * 1000
            status_code = response.status_code if isinstance(response, Response) else 200
            logger.info(
                "Request completed",
                correlation_id=correlation_id,
                method=request.method,
                path=request.path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2)
            )

            if isinstance(response, Response):
                response.headers['X-Correlation-ID'] = correlation_id
            return response

        return wrapper
    return decorator
