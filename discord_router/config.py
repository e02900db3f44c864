"""Application configuration."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError


class Config:
    """Process-wide settings; per-request Discord credentials come from DiscordEnv."""
    AUTO_REGISTER_COMMANDS = os.environ.get('AUTO_REGISTER_COMMANDS', 'false').lower() == 'true'
    DISCORD_API_BASE_URL = os.environ.get('DISCORD_API_BASE_URL', 'https://discord.com/api/v10').rstrip('/')


@dataclass(frozen=True)
class DiscordEnv:
    """Discord credentials resolved for one invocation."""
    application_id: Optional[str] = None
    token: Optional[str] = None
    public_key: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]]) -> 'DiscordEnv':
        """Read the DISCORD_* bindings from an environment mapping.

        Args:
            env: Environment bindings (``os.environ`` in production), may be None

        Returns:
            DiscordEnv with every field possibly unset
        """
        env = env or {}
        return cls(
            application_id=env.get('DISCORD_APPLICATION_ID'),
            token=env.get('DISCORD_TOKEN') or env.get('DISCORD_BOT_TOKEN'),
            public_key=env.get('DISCORD_PUBLIC_KEY'),
        )

    def merge(self, overrides: Optional[Mapping[str, Optional[str]]]) -> 'DiscordEnv':
        """Return a copy with non-None overrides applied."""
        if not overrides:
            return self
        values = {
            'application_id': self.application_id,
            'token': self.token,
            'public_key': self.public_key,
        }
        values.update({k: v for k, v in overrides.items() if k in values and v is not None})
        return DiscordEnv(**values)

    def require_public_key(self) -> str:
        if not self.public_key:
            raise ConfigurationError('DISCORD_PUBLIC_KEY')
        return self.public_key

    def require_credentials(self) -> tuple:
        """Return (application_id, token) or raise naming the missing variable."""
        if not self.application_id:
            raise ConfigurationError('DISCORD_APPLICATION_ID')
        if not self.token:
            raise ConfigurationError('DISCORD_TOKEN')
        return self.application_id, self.token
