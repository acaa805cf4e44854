"""ASGI entrypoint for the meal roulette bot.

Serve ``app`` from one long-running process: confirmation replies are matched
to the pending request held in this process's memory.
"""

from meal_roulette.api.app import create_app
from meal_roulette.containers import build_container

app = create_app(build_container())
