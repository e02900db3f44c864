"""Tests for handler contexts."""
import json
from unittest import mock

import pytest

from discord_router.background import ThreadExecutionContext
from discord_router.builders import Modal
from discord_router.config import DiscordEnv
from discord_router.context import (
    AutocompleteContext,
    CommandContext,
    ComponentContext,
    CronContext,
    ModalContext,
)
from discord_router.errors import BackgroundExecutionUnavailable
from discord_router.router import CronEvent

DISCORD = DiscordEnv(application_id='app', token='bot-token', public_key='key')


def make(cls, data, execution_ctx=None, **interaction):
    interaction = {'type': 2, 'data': data, 'token': 'interaction-token', **interaction}
    return cls(None, {}, execution_ctx, DISCORD, interaction, 'key')


def body_of(response):
    return json.loads(response.get_data(as_text=True))


class TestSharedState:

    def test_variables_are_per_context(self):
        first = make(CommandContext, {})
        second = make(CommandContext, {})
        first.set('user', 'a')
        assert first.get('user') == 'a'
        assert second.get('user') is None
        assert second.get('user', 'default') == 'default'

    def test_env_defaults_to_empty_mapping(self):
        context = CronContext(CronEvent('* * * * *'), None, None, DISCORD, '* * * * *')
        assert context.env == {}

    def test_wait_until_without_execution_context(self):
        with pytest.raises(BackgroundExecutionUnavailable):
            make(CommandContext, {}).wait_until(mock.Mock())

    def test_application_id_falls_back_to_interaction(self):
        context = CommandContext(None, {}, None, DiscordEnv(), {'application_id': '99', 'data': {}}, 'k')
        assert context.application_id == '99'


class TestResponses:

    def test_res_wraps_string_content(self):
        assert body_of(make(CommandContext, {}).res('hi')) == {'type': 4, 'data': {'content': 'hi'}}

    def test_res_passes_dicts(self):
        response = make(CommandContext, {}).res({'embeds': [{'title': 't'}]})
        assert body_of(response) == {'type': 4, 'data': {'embeds': [{'title': 't'}]}}

    def test_res_defer_without_task(self):
        assert body_of(make(CommandContext, {}).res_defer()) == {'type': 5}

    def test_res_defer_runs_task_in_background(self):
        execution_ctx = ThreadExecutionContext()
        task = mock.Mock()
        context = make(CommandContext, {}, execution_ctx)

        response = context.res_defer(task, 'extra')
        execution_ctx.join(timeout=5)

        assert body_of(response) == {'type': 5}
        task.assert_called_once_with(context, 'extra')

    def test_res_modal_builds_builder(self):
        modal = Modal('feedback/1', 'Feedback').text_input('message', 'Message')
        payload = body_of(make(CommandContext, {}).res_modal(modal))
        assert payload['type'] == 9
        assert payload['data']['custom_id'] == 'feedback/1'

    def test_component_updates(self):
        context = make(ComponentContext, {'custom_id': '42', 'values': ['a']})
        assert body_of(context.res_update('new')) == {'type': 7, 'data': {'content': 'new'}}
        assert body_of(context.res_defer_update()) == {'type': 6}
        assert context.var == {'custom_id': '42', 'values': ['a']}

    def test_autocomplete_choices(self):
        context = make(AutocompleteContext, {'options': [{'name': 'q', 'value': 'gr', 'focused': True}]})
        payload = body_of(context.res_autocomplete(['green', {'name': 'Grey', 'value': 'grey'}]))
        assert payload == {'type': 8, 'data': {'choices': [
            {'name': 'green', 'value': 'green'},
            {'name': 'Grey', 'value': 'grey'},
        ]}}
        assert context.focused['name'] == 'q'

    def test_autocomplete_caps_choices(self):
        payload = body_of(make(AutocompleteContext, {}).res_autocomplete(list(range(40))))
        assert len(payload['data']['choices']) == 25


class TestVar:

    def test_command_var_and_sub(self):
        context = make(CommandContext, {'options': [
            {'type': 1, 'name': 'add', 'options': [{'type': 4, 'name': 'amount', 'value': 3}]}
        ]})
        assert context.var == {'amount': 3}
        assert context.sub['string'] == 'add'

    def test_modal_var(self):
        context = make(ModalContext, {'custom_id': '', 'components': [
            {'type': 1, 'components': [{'type': 4, 'custom_id': 'message', 'value': 'great'}]}
        ]})
        assert context.var == {'message': 'great'}


def test_followup_edits_original_response():
    context = make(CommandContext, {})
    with mock.patch('discord_router.discord_service.DiscordService.edit_original_response') as edit:
        edit.return_value = {'id': 'm1'}
        assert context.followup('done') == {'id': 'm1'}
    edit.assert_called_once_with('app', 'interaction-token', {'content': 'done'}, bot_token='bot-token')
