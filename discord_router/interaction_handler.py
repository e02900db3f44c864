"""Interaction parsing and dispatch key extraction."""
import json
from enum import IntEnum

from .errors import InvalidCustomIdError, MalformedInteractionError

CUSTOM_ID_SEPARATOR = '/'


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class OptionType(IntEnum):
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2


def parse_interaction(body: str) -> dict:
    """Deserialize a verified request body into an interaction dict.

    Raises:
        MalformedInteractionError: body is not a JSON object
    """
    try:
        interaction = json.loads(body)
    except ValueError as e:
        raise MalformedInteractionError(f"Interaction body is not valid JSON: {e}") from e
    if not isinstance(interaction, dict):
        raise MalformedInteractionError("Interaction body must be a JSON object")
    return interaction


def split_custom_id(custom_id: str, separator: str = CUSTOM_ID_SEPARATOR) -> tuple:
    """Split ``"<key><separator><payload>"`` at the first separator.

    Raises:
        InvalidCustomIdError: separator absent
    """
    key, found, payload = custom_id.partition(separator)
    if not found:
        raise InvalidCustomIdError(custom_id, separator)
    return key, payload


def _string_field(data: dict, name: str) -> str:
    value = data.get(name)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise MalformedInteractionError(f"Interaction data.{name} must be a string, got {type(value).__name__}")
    return value


def extract_key(interaction: dict, separator: str = CUSTOM_ID_SEPARATOR) -> str:
    """Derive the handler key of an interaction.

    Commands and autocomplete requests are keyed by command name. Components
    and modals are keyed by the custom id prefix; ``data.custom_id`` is
    rewritten in place to the part after the separator so handlers only see
    their local id.

    Args:
        interaction: Parsed interaction dict
        separator: Custom id routing separator

    Returns:
        The key, or '' for interaction types that carry none
    """
    interaction_type = interaction.get('type')
    data = interaction.get('data')
    if data is None:
        data = {}
    elif not isinstance(data, dict):
        raise MalformedInteractionError(f"Interaction data must be an object, got {type(data).__name__}")

    if interaction_type in (InteractionType.APPLICATION_COMMAND, InteractionType.APPLICATION_COMMAND_AUTOCOMPLETE):
        return _string_field(data, 'name')

    if interaction_type in (InteractionType.MESSAGE_COMPONENT, InteractionType.MODAL_SUBMIT):
        key, payload = split_custom_id(_string_field(data, 'custom_id'), separator)
        data['custom_id'] = payload
        return key

    return ''


def flatten_options(options: list) -> dict:
    """Map option name -> value, descending into sub-commands and groups."""
    values = {}
    for option in options or []:
        if option.get('type') in (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP):
            values.update(flatten_options(option.get('options')))
        elif 'value' in option:
            values[option['name']] = option['value']
    return values


def find_subcommand(options: list) -> dict:
    """Return the invoked sub-command group/command names.

    ``string`` joins them with a space (``"group command"``), matching how
    Discord displays the invocation.
    """
    group = command = ''
    for option in options or []:
        if option.get('type') == OptionType.SUB_COMMAND_GROUP:
            group = option['name']
            command = find_subcommand(option.get('options'))['command']
            break
        if option.get('type') == OptionType.SUB_COMMAND:
            command = option['name']
            break
    return {
        'group': group,
        'command': command,
        'string': ' '.join(part for part in (group, command) if part),
    }


def find_focused(options: list):
    """Return the option the user is typing in, or None."""
    for option in options or []:
        if option.get('focused'):
            return option
        nested = find_focused(option.get('options'))
        if nested:
            return nested
    return None


def modal_values(components: list) -> dict:
    """Map custom_id -> value for every text input of a submitted modal."""
    values = {}
    for row in components or []:
        for component in row.get('components', []):
            if 'custom_id' in component and 'value' in component:
                values[component['custom_id']] = component['value']
    return values
