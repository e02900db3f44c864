"""Interaction router: signed HTTP request in, handler response out."""
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Union

from flask import Request, Response

from .background import ExecutionContext, run_sync
from .config import DiscordEnv
from .context import CONTEXT_CLASSES, PONG, CronContext
from .interaction_handler import CUSTOM_ID_SEPARATOR, InteractionType, extract_key, parse_interaction
from .observability import init_observability, traced_function
from .registry import HandlerClass, HandlerMapKind, Key
from .response_utils import json_response, text_response, to_response
from .verify import verify_signature

logger, _ = init_observability('discord-router')

LIVENESS_TEXT = 'Operational'


@dataclass(frozen=True)
class CronEvent:
    """Timer event delivered by the scheduler."""
    cron: str
    type: str = 'scheduled'
    scheduled_time: Optional[int] = None


class DiscordRouter:
    """Routes Discord interactions and cron events to registered handlers.

    Args:
        verify: ``(body, signature, timestamp, public_key) -> bool`` (or an
            awaitable bool); defaults to Ed25519 verification with PyNaCl
        discord_env: Callable mapping the environment bindings to DiscordEnv
            field overrides (``application_id``, ``token``, ``public_key``)
        handler_map: Registry backend, exact or pattern keys
        custom_id_separator: Separator between routing key and local custom id
    """

    def __init__(
        self,
        verify: Callable = None,
        discord_env: Callable[[Mapping], Mapping] = None,
        handler_map: HandlerMapKind = HandlerMapKind.EXACT,
        custom_id_separator: str = CUSTOM_ID_SEPARATOR
    ):
        if not custom_id_separator:
            raise ValueError("custom_id_separator must not be empty")
        self._verify = verify or verify_signature
        self._discord_env = discord_env
        self._map = HandlerMapKind(handler_map).create()
        self.custom_id_separator = custom_id_separator

    # --- Registration ---

    def _set(self, partition: HandlerClass, key: Key, handler: Optional[Callable]):
        if handler is None:
            def decorator(func):
                self._map.register(partition, key, func)
                return func
            return decorator
        self._map.register(partition, key, handler)
        return self

    def command(self, name: Key, handler: Callable = None):
        """Register a slash command handler (decorator when handler is omitted)."""
        return self._set(HandlerClass.COMMAND, name, handler)

    def component(self, key: Key, handler: Callable = None):
        """Register a handler for components whose custom id starts with ``key``."""
        return self._set(HandlerClass.COMPONENT, key, handler)

    def autocomplete(self, name: Key, handler: Callable = None, command_handler: Callable = None):
        """Register an autocomplete handler, and optionally the command it completes."""
        if command_handler is not None:
            self._map.register(HandlerClass.COMMAND, name, command_handler)
        return self._set(HandlerClass.AUTOCOMPLETE, name, handler)

    def modal(self, key: Key, handler: Callable = None):
        return self._set(HandlerClass.MODAL, key, handler)

    def cron(self, expression: Key, handler: Callable = None):
        """Register a handler for a cron expression configured on the scheduler."""
        return self._set(HandlerClass.CRON, expression, handler)

    # --- Dispatch ---

    def discord(self, env: Optional[Mapping]) -> DiscordEnv:
        """Resolve Discord credentials for one invocation."""
        resolved = DiscordEnv.from_env(env)
        if self._discord_env:
            resolved = resolved.merge(self._discord_env(env))
        return resolved

    @traced_function("dispatch_interaction")
    def fetch(
        self,
        request: Request,
        env: Optional[Mapping] = None,
        execution_ctx: Optional[ExecutionContext] = None
    ) -> Response:
        """Handle one HTTP request.

        Raises:
            ConfigurationError: no public key configured
            DispatchError: malformed body, custom id without separator, or no handler
        """
        if request.method == 'GET':
            return text_response(LIVENESS_TEXT)
        if request.method != 'POST':
            return text_response('Not Found', 404)

        discord = self.discord(env)
        public_key = discord.require_public_key()
        body = request.get_data(as_text=True)

        if not self._is_verified(body, request, public_key):
            return text_response('Bad Request', 401)

        interaction = parse_interaction(body)
        interaction_type = interaction.get('type')
        # bool is an int subclass; JSON true must not pass as 1
        known = type(interaction_type) is int

        if known and interaction_type == InteractionType.PING:
            logger.debug("PING interaction received")
            return json_response({'type': PONG})

        if not known or interaction_type not in CONTEXT_CLASSES:
            logger.warning("Unknown interaction type", interaction_type=interaction_type)
            return json_response({'error': 'Unknown Type'}, 400)

        partition = HandlerClass(interaction_type)
        key = extract_key(interaction, self.custom_id_separator)
        handler = self._map.resolve(partition, key)

        logger.info(
            "Dispatching interaction",
            handler_class=partition.name.lower(),
            key=key,
            interaction_id=interaction.get('id')
        )
        context = CONTEXT_CLASSES[partition](request, env, execution_ctx, discord, interaction, key)
        return to_response(run_sync(handler(context)))

    def _is_verified(self, body: str, request: Request, public_key: str) -> bool:
        try:
            verified = run_sync(self._verify(
                body,
                request.headers.get('X-Signature-Ed25519'),
                request.headers.get('X-Signature-Timestamp'),
                public_key
            ))
        except Exception as e:
            logger.warning("Signature verifier raised", error=e)
            return False
        if not verified:
            logger.warning("Invalid Discord signature")
        return bool(verified)

    @traced_function("dispatch_cron")
    def scheduled(
        self,
        event: Union[CronEvent, str],
        env: Optional[Mapping] = None,
        execution_ctx: Optional[ExecutionContext] = None
    ):
        """Run the handler registered for a cron expression.

        With an execution context the handler is submitted in the background
        and this returns immediately; otherwise it runs to completion.
        """
        if isinstance(event, str):
            event = CronEvent(cron=event)
        handler = self._map.resolve(HandlerClass.CRON, event.cron)
        context = CronContext(event, env, execution_ctx, self.discord(env), event.cron)

        logger.info("Dispatching cron", cron=event.cron, scheduled_time=event.scheduled_time)
        if execution_ctx is not None:
            execution_ctx.wait_until(handler, context)
        else:
            run_sync(handler(context))
