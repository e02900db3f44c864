"""Per-invocation contexts handed to registered handlers.

A context is created for one interaction (or one cron tick) and dropped once
the response is produced, or once the background task it spawned finishes.
"""
from typing import Any, Callable, Mapping, Optional

from .background import ExecutionContext
from .config import DiscordEnv
from .errors import BackgroundExecutionUnavailable
from .interaction_handler import find_focused, find_subcommand, flatten_options, modal_values
from .registry import HandlerClass
from .response_utils import json_response

PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4
DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
DEFERRED_UPDATE_MESSAGE = 6
UPDATE_MESSAGE = 7
APPLICATION_COMMAND_AUTOCOMPLETE_RESULT = 8
MODAL = 9


def _build(data: Any) -> Any:
    """Accept builder objects, plain strings (message content) and dicts."""
    if hasattr(data, 'build'):
        return data.build()
    if isinstance(data, str):
        return {'content': data}
    return data


class BaseContext:
    """State shared by every handler class."""

    handler_class: HandlerClass = None

    def __init__(
        self,
        env: Optional[Mapping[str, str]],
        execution_ctx: Optional[ExecutionContext],
        discord: DiscordEnv,
        key: str
    ):
        self.env = env if env is not None else {}
        self.execution_ctx = execution_ctx
        self.discord = discord
        self.key = key
        self._vars = {}

    def set(self, name: str, value: Any):
        self._vars[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self._vars.get(name, default)

    def wait_until(self, task: Callable, *args):
        """Submit work that must outlive the current invocation.

        Raises:
            BackgroundExecutionUnavailable: the host provided no execution context
        """
        if self.execution_ctx is None:
            raise BackgroundExecutionUnavailable()
        return self.execution_ctx.wait_until(task, *args)


class CronContext(BaseContext):
    handler_class = HandlerClass.CRON

    def __init__(self, event, env, execution_ctx, discord, key):
        super().__init__(env, execution_ctx, discord, key)
        self.event = event

    @property
    def cron(self) -> str:
        return self.event.cron


class InteractionContext(BaseContext):
    """Context for an HTTP interaction (types 2-5)."""

    def __init__(self, request, env, execution_ctx, discord, interaction: dict, key: str):
        super().__init__(env, execution_ctx, discord, key)
        self.request = request
        self.interaction = interaction

    @property
    def data(self) -> dict:
        return self.interaction.get('data') or {}

    @property
    def var(self) -> dict:
        return {}

    @property
    def token(self) -> Optional[str]:
        return self.interaction.get('token')

    @property
    def application_id(self) -> Optional[str]:
        return self.discord.application_id or self.interaction.get('application_id')

    def res_base(self, payload: dict):
        return json_response(payload)

    def res(self, data: Any):
        """Reply with a message (CHANNEL_MESSAGE_WITH_SOURCE)."""
        return self.res_base({'type': CHANNEL_MESSAGE_WITH_SOURCE, 'data': _build(data)})

    def res_defer(self, task: Callable = None, *args):
        """Acknowledge now, optionally continuing ``task(self, *args)`` in the background.

        Raises:
            BackgroundExecutionUnavailable: task given but no execution context
        """
        if task is not None:
            self.wait_until(task, self, *args)
        return self.res_base({'type': DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE})

    def followup(self, data: Any) -> dict:
        """Edit the original (deferred) response through the REST API."""
        from .discord_service import DiscordService

        return DiscordService.edit_original_response(
            self.application_id, self.token, _build(data), bot_token=self.discord.token
        )


class _ModalMixin:
    def res_modal(self, modal: Any):
        return self.res_base({'type': MODAL, 'data': _build(modal)})


class CommandContext(_ModalMixin, InteractionContext):
    handler_class = HandlerClass.COMMAND

    @property
    def var(self) -> dict:
        return flatten_options(self.data.get('options'))

    @property
    def sub(self) -> dict:
        return find_subcommand(self.data.get('options'))


class ComponentContext(_ModalMixin, InteractionContext):
    handler_class = HandlerClass.COMPONENT

    @property
    def custom_id(self) -> str:
        return self.data.get('custom_id', '')

    @property
    def var(self) -> dict:
        return {'custom_id': self.custom_id, 'values': self.data.get('values', [])}

    def res_update(self, data: Any):
        """Edit the message the component is attached to (UPDATE_MESSAGE)."""
        return self.res_base({'type': UPDATE_MESSAGE, 'data': _build(data)})

    def res_defer_update(self, task: Callable = None, *args):
        if task is not None:
            self.wait_until(task, self, *args)
        return self.res_base({'type': DEFERRED_UPDATE_MESSAGE})


class AutocompleteContext(InteractionContext):
    handler_class = HandlerClass.AUTOCOMPLETE

    @property
    def var(self) -> dict:
        return flatten_options(self.data.get('options'))

    @property
    def sub(self) -> dict:
        return find_subcommand(self.data.get('options'))

    @property
    def focused(self) -> Optional[dict]:
        return find_focused(self.data.get('options'))

    def res_autocomplete(self, choices: list):
        """Return up to 25 suggestions; plain values become ``{name, value}`` pairs."""
        choices = [
            choice if isinstance(choice, dict) else {'name': str(choice), 'value': choice}
            for choice in choices
        ][:25]
        return self.res_base({
            'type': APPLICATION_COMMAND_AUTOCOMPLETE_RESULT,
            'data': {'choices': choices}
        })


class ModalContext(InteractionContext):
    handler_class = HandlerClass.MODAL

    @property
    def custom_id(self) -> str:
        return self.data.get('custom_id', '')

    @property
    def var(self) -> dict:
        return modal_values(self.data.get('components'))


CONTEXT_CLASSES = {
    HandlerClass.COMMAND: CommandContext,
    HandlerClass.COMPONENT: ComponentContext,
    HandlerClass.AUTOCOMPLETE: AutocompleteContext,
    HandlerClass.MODAL: ModalContext,
}
