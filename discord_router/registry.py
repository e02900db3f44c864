"""Registry for interaction handlers.

Handlers are stored per partition (cron, command, component, autocomplete,
modal). Two lookup strategies share one interface: ``StringMap`` matches keys
literally, ``PatternMap`` also accepts compiled regular expressions and tries
them in registration order.
"""
import re
from enum import Enum, IntEnum
from typing import Callable, Dict, Union

from .errors import HandlerNotFoundError

Key = Union[str, re.Pattern]


class HandlerClass(IntEnum):
    """Handler partitions; values mirror the interaction ``type`` field."""
    CRON = 0
    COMMAND = 2
    COMPONENT = 3
    AUTOCOMPLETE = 4
    MODAL = 5


class HandlerMap:
    """Key -> handler table partitioned by HandlerClass."""

    def __init__(self):
        self._handlers: Dict[HandlerClass, Dict[Key, Callable]] = {
            partition: {} for partition in HandlerClass
        }

    def register(self, partition: HandlerClass, key: Key, handler: Callable):
        """Store a handler; an existing handler under the same key is replaced."""
        self._check_key(key)
        self._handlers[HandlerClass(partition)][key] = handler

    def resolve(self, partition: HandlerClass, key: str) -> Callable:
        """Return the handler for a runtime key or raise HandlerNotFoundError."""
        partition = HandlerClass(partition)
        handler = self._lookup(self._handlers[partition], key)
        if handler is None:
            raise HandlerNotFoundError(partition, key)
        return handler

    def keys(self, partition: HandlerClass) -> list:
        return list(self._handlers[HandlerClass(partition)])

    def _check_key(self, key: Key):
        raise NotImplementedError

    def _lookup(self, table: Dict[Key, Callable], key: str):
        raise NotImplementedError


class StringMap(HandlerMap):
    """Exact-match lookup."""

    def _check_key(self, key: Key):
        if not isinstance(key, str):
            raise TypeError(f"StringMap keys must be str, got {type(key).__name__}")

    def _lookup(self, table, key):
        return table.get(key)


class PatternMap(HandlerMap):
    """Pattern lookup: the first registered key that matches wins.

    Compiled patterns match with ``search``, so anchor them (``^...$``) for a
    whole-key match. Plain strings compare literally.
    """

    def _check_key(self, key: Key):
        if not isinstance(key, (str, re.Pattern)):
            raise TypeError(f"PatternMap keys must be str or re.Pattern, got {type(key).__name__}")

    def _lookup(self, table, key):
        for pattern, handler in table.items():
            if isinstance(pattern, str):
                if pattern == key:
                    return handler
            elif pattern.search(key):
                return handler
        return None


class HandlerMapKind(Enum):
    """Registry backend, selected once when the router is built."""
    EXACT = 'exact'
    PATTERN = 'pattern'

    def create(self) -> HandlerMap:
        return StringMap() if self is HandlerMapKind.EXACT else PatternMap()
