"""Service for Discord REST API calls."""
from typing import Iterable, Optional

import requests

from .config import Config, DiscordEnv
from .errors import ConfigurationError
from .observability import init_observability

logger, _ = init_observability('discord-router-rest')


def _build(command) -> dict:
    return command.build() if hasattr(command, 'build') else command


class DiscordService:
    """Service for Discord API interactions."""

    @staticmethod
    def register_command(command, discord: DiscordEnv) -> dict:
        """Register a single application command.

        Args:
            command: Command builder or command dict
            discord: Resolved credentials (application id and bot token required)

        Returns:
            Dict with 'status' ('success' or 'error') and 'message'
        """
        command = _build(command)
        try:
            application_id, token = discord.require_credentials()
        except ConfigurationError as e:
            return {'status': 'error', 'message': str(e)}

        url = f"{Config.DISCORD_API_BASE_URL}/applications/{application_id}/commands"
        headers = {
            "Authorization": f"Bot {token}",
            "Content-Type": "application/json"
        }

        try:
            response = requests.post(url, headers=headers, json=command, timeout=5)
            if response.status_code in [200, 201]:
                logger.info("Command registered", command_name=command['name'])
                return {
                    'status': 'success',
                    'message': f"Command '/{command['name']}' registered successfully"
                }
            logger.warning(
                "Command registration rejected",
                command_name=command['name'],
                status_code=response.status_code,
                response_text=response.text[:200]
            )
            return {
                'status': 'error',
                'message': f"Error: {response.status_code}",
                'details': response.text
            }
        except requests.RequestException as e:
            logger.error("Command registration failed", error=e, command_name=command['name'])
            return {
                'status': 'error',
                'message': str(e)
            }

    @staticmethod
    def register_commands(commands: Iterable, discord: DiscordEnv) -> list:
        """Register every command, returning one result dict per command."""
        results = []
        for command in commands:
            command = _build(command)
            result = DiscordService.register_command(command, discord)
            results.append({'command': command['name'], **result})
        return results

    @staticmethod
    def edit_original_response(
        application_id: str,
        interaction_token: str,
        data: dict,
        bot_token: Optional[str] = None,
        correlation_id: Optional[str] = None
    ) -> dict:
        """Replace the original interaction response (typically a deferred one).

        Raises:
            ConfigurationError: application id missing
            requests.HTTPError: Discord rejected the edit
        """
        if not application_id:
            raise ConfigurationError('DISCORD_APPLICATION_ID')

        url = f"{Config.DISCORD_API_BASE_URL}/webhooks/{application_id}/{interaction_token}/messages/@original"
        headers = {"Content-Type": "application/json"}
        if bot_token:
            headers["Authorization"] = f"Bot {bot_token}"

        response = requests.patch(url, headers=headers, json=data, timeout=10)
        if response.status_code not in [200, 204]:
            logger.error(
                "Error editing original response",
                correlation_id=correlation_id,
                status_code=response.status_code,
                response_text=response.text[:200]
            )
            response.raise_for_status()

        logger.info("Original response edited", correlation_id=correlation_id, application_id=application_id)
        return response.json() if response.content else {}
