"""Tests for the Functions Framework entry points and the bundled bot."""
import base64
import json
from unittest import mock

import pytest
from cloudevents.http import CloudEvent

from conftest import build_request
from discord_router import main


def body_of(response):
    return json.loads(response.get_data(as_text=True))


@pytest.fixture(autouse=True)
def environ(env, monkeypatch):
    for name, value in env.items():
        monkeypatch.setenv(name, value)


def scheduler_event(payload):
    data = base64.b64encode(json.dumps(payload).encode()).decode()
    attributes = {'type': 'google.cloud.pubsub.topic.v1.messagePublished', 'source': '//pubsub'}
    return CloudEvent(attributes, {'message': {'data': data}})


class TestDiscordInteractions:

    def test_ping(self, signed_request):
        response = main.discord_interactions(signed_request({'type': 1}))
        assert body_of(response) == {'type': 1}
        assert response.headers['X-Correlation-ID']

    def test_correlation_id_is_echoed(self):
        request = build_request('GET', headers={'X-Correlation-ID': 'abc'})
        assert main.discord_interactions(request).headers['X-Correlation-ID'] == 'abc'

    def test_dispatch_errors_become_400(self, signed_request):
        response = main.discord_interactions(signed_request({'type': 3, 'data': {'custom_id': 'counter'}}))
        assert response.status_code == 400
        assert 'separator' in body_of(response)['error']

    def test_wrongly_typed_custom_id_is_400(self, signed_request):
        response = main.discord_interactions(signed_request({'type': 3, 'data': {'custom_id': 42}}))
        assert response.status_code == 400
        assert 'custom_id' in body_of(response)['error']

    def test_unknown_command_is_400(self, signed_request):
        response = main.discord_interactions(signed_request({'type': 2, 'data': {'name': 'nope'}}))
        assert response.status_code == 400

    def test_counter_round_trip(self, signed_request):
        response = main.discord_interactions(signed_request({'type': 3, 'data': {'custom_id': 'counter/4'}}))
        payload = body_of(response)
        assert payload['type'] == 7
        assert payload['data']['content'] == 'Clicks: 5'
        assert payload['data']['components'][0]['components'][0]['custom_id'] == 'counter/5'

    def test_colour_autocomplete(self, signed_request):
        response = main.discord_interactions(signed_request({'type': 4, 'data': {
            'name': 'colour', 'options': [{'type': 3, 'name': 'name', 'value': 'g', 'focused': True}]
        }}))
        assert body_of(response)['data']['choices'] == [{'name': 'green', 'value': 'green'}]

    def test_feedback_modal_submit(self, signed_request):
        response = main.discord_interactions(signed_request({'type': 5, 'data': {
            'custom_id': 'feedback/',
            'components': [{'type': 1, 'components': [{'type': 4, 'custom_id': 'message', 'value': 'nice'}]}]
        }}))
        assert body_of(response)['data']['flags'] == 64

    def test_deferred_report(self, signed_request):
        with mock.patch('discord_router.discord_service.DiscordService.edit_original_response') as edit, \
                mock.patch.object(main, 'ThreadExecutionContext') as execution_cls:
            execution_ctx = execution_cls.return_value
            response = main.discord_interactions(signed_request({
                'type': 2, 'token': 'tok', 'data': {'name': 'report'}
            }))
            assert body_of(response) == {'type': 5}

            task, context = execution_ctx.wait_until.call_args.args
            task(context)

        assert edit.call_args.args[:2] == ('123456', 'tok')


class TestScheduledHandler:

    def test_runs_daily_job(self):
        with mock.patch('discord_router.handlers.logger') as logger:
            main.scheduled_handler(scheduler_event({'cron': '0 9 * * *', 'scheduled_time': 1}))
        logger.info.assert_called_once_with('Daily job', cron='0 9 * * *', scheduled_time=1)

    def test_invalid_message_is_logged(self):
        with mock.patch.object(main.router, 'scheduled') as scheduled:
            main.scheduled_handler(scheduler_event({'no_cron': True}))
        scheduled.assert_not_called()


class TestRegisterCommands:

    def test_post_only(self):
        assert main.register_commands_handler(build_request('GET')).status_code == 405

    @mock.patch('discord_router.discord_service.requests.post')
    def test_registers_bundled_commands(self, post):
        post.return_value = mock.Mock(status_code=201)
        response = main.register_commands_handler(build_request('POST'))
        names = [result['command'] for result in body_of(response)['results']]
        assert names == [command.build()['name'] for command in main.COMMANDS]

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv('DISCORD_TOKEN')
        monkeypatch.delenv('DISCORD_BOT_TOKEN', raising=False)
        assert main.register_commands_handler(build_request('POST')).status_code == 500
