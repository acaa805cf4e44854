"""Tests for container wiring."""

import asyncio

from meal_roulette.containers import build_container
from meal_roulette.domain.menu import Category


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.command_handler.menu_service is container.menu_service
    assert container.confirmation_gate.timeout_seconds == 0.05
    assert container.menu_service.draw_texts[Category.DRINK] == "Drink [food]!"
    asyncio.run(container.close_resources())
