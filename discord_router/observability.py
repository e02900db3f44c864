"""JSON logging and OpenTelemetry tracing for the router."""
import os
import json
import logging
import traceback
import uuid
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from functools import wraps

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.instrumentation.requests import RequestsInstrumentor

SERVICE_NAMESPACE = 'discord-router'

_tracer_provider = None


def _error_fields(error: Exception, with_stack: bool) -> Dict[str, Any]:
    fields = {"type": type(error).__name__, "message": str(error)}
    if with_stack:
        fields["stacktrace"] = ''.join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    return fields


def _current_trace_ids() -> Dict[str, str]:
    span = trace.get_current_span()
    if not span.is_recording():
        return {}
    span_context = span.get_span_context()
    return {
        "trace_id": format(span_context.trace_id, '032x'),
        "span_id": format(span_context.span_id, '016x'),
    }


class StructuredLogger:
    """Logger emitting one JSON object per line, keyword arguments as fields.

    Usage:
        logger.warning("Invalid Discord signature", correlation_id=cid)
        logger.error("Background task failed", error=e, task='report')
    """

    def __init__(self, name: str, level: int = logging.INFO):
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.propagate = False
        self.logger.handlers = [self._stream_handler()]

    @staticmethod
    def _stream_handler() -> logging.Handler:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        return handler

    def _log(self, level: int, message: str, error: Optional[Exception] = None,
             correlation_id: Optional[str] = None, **fields):
        if not self.logger.isEnabledFor(level):
            return
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": logging.getLevelName(level),
            "service": self.name,
            "message": message,
            **_current_trace_ids(),
        }
        if correlation_id:
            entry["correlation_id"] = correlation_id
        if error is not None:
            entry["error"] = _error_fields(error, with_stack=level >= logging.ERROR)
        entry.update(fields)
        self.logger.log(level, json.dumps(entry, default=str))

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        """Log ERROR; pass ``error=`` to attach type, message and stack trace."""
        self._log(logging.ERROR, message, **fields)


class JsonFormatter(logging.Formatter):
    """Passes pre-rendered JSON through, wraps anything else."""

    def format(self, record):
        if isinstance(record.msg, str) and record.msg.startswith('{'):
            return record.msg
        return json.dumps({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
        })


def _install_tracer_provider(environment: str) -> TracerProvider:
    """Create the process-wide provider; spans go to Cloud Trace unless LOCAL_DEV is set."""
    provider = TracerProvider(resource=Resource.create({
        "service.name": SERVICE_NAMESPACE,
        "deployment.environment": environment,
    }))

    if not os.getenv("LOCAL_DEV"):
        try:
            from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter

            project_id = os.getenv('GCP_PROJECT_ID', os.getenv('GOOGLE_CLOUD_PROJECT'))
            provider.add_span_processor(BatchSpanProcessor(CloudTraceSpanExporter(project_id=project_id)))
        except Exception as e:
            print(f"Warning: Could not setup Cloud Trace exporter: {e}")

    trace.set_tracer_provider(provider)

    # Outbound Discord REST calls (command registration, followups)
    try:
        RequestsInstrumentor().instrument(tracer_provider=provider)
    except Exception as e:
        print(f"Warning: Could not instrument requests: {e}")

    return provider


def init_observability(name: str, environment: str = None):
    """Return a module logger, installing tracing on the first call.

    Args:
        name: Logger name, one per module
        environment: Deployment environment (defaults to $ENVIRONMENT)

    Returns:
        tuple: (logger, tracer_provider)
    """
    global _tracer_provider

    if _tracer_provider is None:
        _tracer_provider = _install_tracer_provider(environment or os.getenv('ENVIRONMENT', 'production'))

    level = logging.DEBUG if os.getenv('LOG_LEVEL', '').upper() == 'DEBUG' else logging.INFO
    return StructuredLogger(name, level=level), _tracer_provider


def traced_function(operation_name: Optional[str] = None):
    """Run the decorated function inside a span, recording failures on it.

    Usage:
        @traced_function("dispatch_interaction")
        def fetch(request):
            ...
    """
    def decorator(func):
        span_name = operation_name or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs):
            tracer = trace.get_tracer(__name__)
            with tracer.start_as_current_span(span_name, record_exception=False) as span:
                span.set_attribute("code.function", func.__qualname__)
                span.set_attribute("code.namespace", func.__module__)
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    span.set_attribute("error.type", type(e).__name__)
                    span.record_exception(e)
                    raise

        return wrapper
    return decorator


def get_correlation_id(request=None) -> str:
    """X-Correlation-ID, then X-Request-ID, else a fresh UUID."""
    if request is not None:
        for header in ('X-Correlation-ID', 'X-Request-ID'):
            value = request.headers.get(header)
            if value:
                return value
    return str(uuid.uuid4())
