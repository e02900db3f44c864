"""Router for Discord's webhook-based Interactions API."""
from .background import ExecutionContext, ThreadExecutionContext
from .config import DiscordEnv
from .context import (
    AutocompleteContext,
    CommandContext,
    ComponentContext,
    CronContext,
    ModalContext,
)
from .errors import (
    BackgroundExecutionUnavailable,
    ConfigurationError,
    DispatchError,
    HandlerNotFoundError,
    InvalidCustomIdError,
    MalformedInteractionError,
)
from .interaction_handler import CUSTOM_ID_SEPARATOR, extract_key
from .registry import HandlerClass, HandlerMapKind, PatternMap, StringMap
from .router import CronEvent, DiscordRouter
from .verify import verify_signature

__all__ = [
    'AutocompleteContext',
    'BackgroundExecutionUnavailable',
    'CUSTOM_ID_SEPARATOR',
    'CommandContext',
    'ComponentContext',
    'ConfigurationError',
    'CronContext',
    'CronEvent',
    'DiscordEnv',
    'DiscordRouter',
    'DispatchError',
    'ExecutionContext',
    'HandlerClass',
    'HandlerMapKind',
    'HandlerNotFoundError',
    'InvalidCustomIdError',
    'MalformedInteractionError',
    'ModalContext',
    'PatternMap',
    'StringMap',
    'ThreadExecutionContext',
    'extract_key',
    'verify_signature',
]
