"""Functions Framework entry points for the interaction router.

- ``discord_interactions``: HTTP endpoint configured as the Discord
  Interactions Endpoint URL
- ``scheduled_handler``: Pub/Sub CloudEvent published by Cloud Scheduler
- ``register_commands_handler``: HTTP endpoint registering slash commands
"""
import base64
import json
import os

import functions_framework
from cloudevents.http import CloudEvent
from flask import Request

from .background import ThreadExecutionContext
from .config import Config, DiscordEnv
from .correlation import with_correlation
from .discord_service import DiscordService
from .errors import DispatchError
from .handlers import COMMANDS, create_router
from .observability import init_observability, traced_function
from .response_utils import json_response
from .router import CronEvent

logger, _ = init_observability('discord-router-main')

router = create_router()


@functions_framework.http
@with_correlation(logger)
def discord_interactions(request: Request):
    """Main HTTP handler for Discord interactions."""
    correlation_id = getattr(request, 'correlation_id', None)
    execution_ctx = ThreadExecutionContext(correlation_id=correlation_id)

    try:
        return router.fetch(request, os.environ, execution_ctx)
    except DispatchError as e:
        logger.warning(
            "Interaction could not be dispatched",
            error=e,
            correlation_id=correlation_id,
            error_type=type(e).__name__
        )
        return json_response({'error': str(e)}, e.status_code)


@functions_framework.cloud_event
@traced_function("scheduled_handler")
def scheduled_handler(cloud_event: CloudEvent):
    """Decode a Cloud Scheduler Pub/Sub message and run the matching cron handler.

    The scheduler job publishes ``{"cron": "<expression>"}`` as message data.
    """
    message = (cloud_event.data or {}).get('message', {})
    try:
        payload = json.loads(base64.b64decode(message['data']).decode('utf-8'))
        event = CronEvent(
            cron=payload['cron'],
            scheduled_time=payload.get('scheduled_time')
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error("Invalid scheduler message", error=e, event_id=cloud_event.get('id'))
        return

    router.scheduled(event, os.environ)


@functions_framework.http
@with_correlation(logger)
def register_commands_handler(request: Request):
    """Register the bundled slash commands with Discord."""
    if request.method != 'POST':
        return json_response({'error': 'Method not allowed'}, 405)

    discord = DiscordEnv.from_env(os.environ)
    if not discord.application_id or not discord.token:
        return json_response({
            'error': 'DISCORD_TOKEN and DISCORD_APPLICATION_ID must be configured'
        }, 500)

    results = DiscordService.register_commands(COMMANDS, discord)
    return json_response({
        'message': 'Registration completed',
        'results': results,
        'note': 'Commands may take a few minutes to appear in Discord'
    })


if Config.AUTO_REGISTER_COMMANDS:
    for result in DiscordService.register_commands(COMMANDS, DiscordEnv.from_env(os.environ)):
        if result['status'] != 'success':
            logger.warning("Failed to register command", command_name=result['command'], message=result['message'])
