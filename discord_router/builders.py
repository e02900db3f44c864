"""Builders for outbound payloads (commands, options, modals, embeds).

Builders are immutable: every fluent call returns a new builder and the
original is left untouched, so a partially configured builder can be
shared safely. ``build()`` returns a fresh dict each time.
"""
import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .interaction_handler import CUSTOM_ID_SEPARATOR

COLOR_SUCCESS = 0x00FF00
COLOR_INFO = 0x0066CC
COLOR_WARNING = 0xFF6B6B
COLOR_ERROR = 0xFF4C4C

EPHEMERAL = 1 << 6


def custom_id(key: str, payload: str = '', separator: str = CUSTOM_ID_SEPARATOR) -> str:
    """Compose ``"<key><separator><payload>"`` for routing back to a handler."""
    if separator in key:
        raise ValueError(f"Routing key {key!r} must not contain {separator!r}")
    return f"{key}{separator}{payload}"


class _Builder:
    def __init__(self, **payload):
        self._payload = payload

    def _assign(self, **fields):
        clone = copy.copy(self)
        clone._payload = {**self._payload, **fields}
        return clone

    def build(self) -> Dict[str, Any]:
        return copy.deepcopy(self._payload)

    def __repr__(self):
        return f"{type(self).__name__}({self._payload!r})"


def _built(items) -> list:
    return [item.build() if isinstance(item, _Builder) else item for item in items]


class Command(_Builder):
    """Application command definition.

    Args:
        name: 1-32 character name
        description: 1-100 characters for CHAT_INPUT commands, '' for USER and MESSAGE commands
    """

    def __init__(self, name: str, description: str = ''):
        super().__init__(name=name, description=description)

    def type(self, value: int):
        return self._assign(type=value)

    def guild_id(self, value: str):
        return self._assign(guild_id=value)

    def name_localizations(self, value: Dict[str, str]):
        return self._assign(name_localizations=value)

    def description_localizations(self, value: Dict[str, str]):
        return self._assign(description_localizations=value)

    def default_member_permissions(self, value: Optional[str]):
        return self._assign(default_member_permissions=value)

    def contexts(self, *values: int):
        return self._assign(contexts=list(values))

    def nsfw(self, value: bool = True):
        return self._assign(nsfw=value)

    def options(self, *options):
        """Append options (builders or raw option dicts)."""
        return self._assign(options=self._payload.get('options', []) + _built(options))


class Option(_Builder):
    option_type = None

    def __init__(self, name: str, description: str):
        super().__init__(name=name, description=description, type=self.option_type)

    def required(self, value: bool = True):
        return self._assign(required=value)

    def name_localizations(self, value: Dict[str, str]):
        return self._assign(name_localizations=value)

    def description_localizations(self, value: Dict[str, str]):
        return self._assign(description_localizations=value)


class SubCommandOption(Option):
    option_type = 1

    def options(self, *options):
        return self._assign(options=_built(options))


class SubCommandGroupOption(Option):
    option_type = 2

    def options(self, *subcommands):
        return self._assign(options=_built(subcommands))


class StringOption(Option):
    option_type = 3

    def choices(self, *choices: Dict[str, str]):
        return self._assign(choices=list(choices))

    def min_length(self, value: int):
        return self._assign(min_length=value)

    def max_length(self, value: int):
        return self._assign(max_length=value)

    def autocomplete(self, value: bool = True):
        return self._assign(autocomplete=value)


class NumberOption(Option):
    """Number option; pass ``integer=True`` for an INTEGER option."""
    option_type = 10

    def __init__(self, name: str, description: str, integer: bool = False):
        super().__init__(name, description)
        if integer:
            self._payload['type'] = 4

    def choices(self, *choices: Dict[str, Any]):
        return self._assign(choices=list(choices))

    def min_value(self, value: float):
        return self._assign(min_value=value)

    def max_value(self, value: float):
        return self._assign(max_value=value)

    def autocomplete(self, value: bool = True):
        return self._assign(autocomplete=value)


class BooleanOption(Option):
    option_type = 5


class UserOption(Option):
    option_type = 6


class ChannelOption(Option):
    option_type = 7

    def channel_types(self, *values: int):
        return self._assign(channel_types=list(values))


class RoleOption(Option):
    option_type = 8


class MentionableOption(Option):
    option_type = 9


class AttachmentOption(Option):
    option_type = 11


class Modal(_Builder):
    """Modal with one text input per action row.

    Args:
        custom_id: Full custom id, usually from ``custom_id(key, payload)``
        title: Modal title (max 45 characters)
    """

    def __init__(self, custom_id: str, title: str):
        super().__init__(custom_id=custom_id, title=title, components=[])

    def text_input(self, custom_id: str, label: str, style: int = 1, required: bool = True, **fields):
        row = {
            'type': 1,
            'components': [{
                'type': 4,
                'custom_id': custom_id,
                'label': label,
                'style': style,
                'required': required,
                **fields
            }]
        }
        return self._assign(components=self._payload['components'] + [row])


def create_embed(
    title: str,
    description: str = None,
    color: int = COLOR_INFO,
    fields: List[Dict[str, Any]] = None,
    footer: Dict[str, str] = None,
    timestamp: bool = True
) -> Dict[str, Any]:
    """Create a Discord embed with consistent formatting.

    Args:
        title: Embed title
        description: Embed description
        color: Embed color (hex integer)
        fields: List of field dicts with 'name', 'value', 'inline' keys
        footer: Footer dict with 'text' key
        timestamp: Whether to include timestamp (default: True)

    Returns:
        Discord embed dict
    """
    embed = {
        'title': title,
        'color': color
    }

    if description:
        embed['description'] = description

    if fields:
        embed['fields'] = fields

    if footer:
        embed['footer'] = footer

    if timestamp:
        embed['timestamp'] = datetime.now(timezone.utc).isoformat()

    return embed


def create_message(
    *embeds: Dict[str, Any],
    content: str = None,
    components: List[Dict[str, Any]] = None,
    ephemeral: bool = False
) -> Dict[str, Any]:
    """Create message data for ``ctx.res`` / ``ctx.followup``."""
    message = {}
    if content:
        message['content'] = content
    if embeds:
        message['embeds'] = list(embeds)
    if components:
        message['components'] = components
    if ephemeral:
        message['flags'] = EPHEMERAL
    return message


def button(custom_id: str, label: str, style: int = 1) -> Dict[str, Any]:
    """Single interactive button wrapped in an action row."""
    return {
        'type': 1,
        'components': [{'type': 2, 'custom_id': custom_id, 'label': label, 'style': style}]
    }
