"""Bundled bot: command definitions and their handlers."""
import re

from .builders import (
    COLOR_SUCCESS,
    Command,
    Modal,
    StringOption,
    button,
    create_embed,
    create_message,
    custom_id,
)
from .observability import init_observability
from .registry import HandlerMapKind
from .router import DiscordRouter

logger, _ = init_observability('discord-router-handlers')

COLOURS = ['red', 'orange', 'yellow', 'green', 'blue', 'indigo', 'violet']
DAILY_CRON = '0 9 * * *'

COMMANDS = [
    Command('ping', 'Test bot latency'),
    Command('hello', 'Greeting'),
    Command('help', 'Show available commands'),
    Command('counter', 'Post a click counter'),
    Command('feedback', 'Send feedback to the maintainers'),
    Command('colour', 'Pick a colour').options(
        StringOption('name', 'Colour name').required().autocomplete()
    ),
    Command('report', 'Build a usage report'),
]


def ping(c):
    return c.res(create_message(create_embed(
        'Pong!', 'Bot is running.', color=COLOR_SUCCESS, footer={'text': 'Status: Online'}
    )))


def hello(c):
    return c.res(f"Hello! I am application {c.application_id}.")


def help_command(c):
    fields = [
        {'name': f"/{command.build()['name']}", 'value': command.build()['description'], 'inline': True}
        for command in COMMANDS
    ]
    return c.res(create_message(create_embed('Available Commands', fields=fields), ephemeral=True))


def counter(c):
    return c.res(create_message(content='Clicks: 0', components=[button(custom_id('counter', '0'), '+1')]))


def counter_click(c):
    """The local custom id carries the current count."""
    count = int(c.custom_id or 0) + 1
    return c.res_update(create_message(
        content=f"Clicks: {count}",
        components=[button(custom_id('counter', str(count)), '+1')]
    ))


def feedback(c):
    modal = Modal(custom_id('feedback', c.sub['string']), 'Feedback').text_input('message', 'Your feedback', style=2)
    return c.res_modal(modal)


def feedback_submit(c):
    logger.info("Feedback received", length=len(c.var.get('message', '')))
    return c.res(create_message(content='Thanks for the feedback!', ephemeral=True))


def colour(c):
    return c.res(f"You picked {c.var.get('name', 'nothing')}.")


def colour_autocomplete(c):
    typed = str((c.focused or {}).get('value', '')).lower()
    return c.res_autocomplete([name for name in COLOURS if name.startswith(typed)])


def report(c):
    return c.res_defer(build_report)


def build_report(c):
    """Runs after the deferred acknowledgement has been sent."""
    c.followup(create_message(create_embed('Usage report', 'All systems nominal.')))


def daily(c):
    logger.info("Daily job", cron=c.cron, scheduled_time=c.event.scheduled_time)


def create_router() -> DiscordRouter:
    """Compose the bundled router."""
    return (
        DiscordRouter(handler_map=HandlerMapKind.PATTERN)
        .command('ping', ping)
        .command('hello', hello)
        .command('help', help_command)
        .command('counter', counter)
        .component('counter', counter_click)
        .command('feedback', feedback)
        .modal('feedback', feedback_submit)
        .autocomplete('colour', colour_autocomplete, colour)
        .command('report', report)
        .cron(re.compile(r'^0 9 \* \* \*$'), daily)
    )
