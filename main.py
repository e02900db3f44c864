"""Functions Framework source file; deploy with --target set to one of these."""
from discord_router.main import (  # noqa: F401
    discord_interactions,
    register_commands_handler,
    scheduled_handler,
)
