"""Pytest configuration for API tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.api.game_handler import GameHandler
from app.config import Settings
from app.services.room_registry import RoomRegistry


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def registry():
    """Create an empty room registry."""
    return RoomRegistry(Settings())


@pytest.fixture
def mock_manager():
    """Create a mock connection manager."""
    manager = MagicMock()
    manager.send_response = AsyncMock()
    manager.dispatch_message = AsyncMock()
    manager.send_personal_message = AsyncMock()
    manager.broadcast_to_room = AsyncMock()
    return manager


@pytest.fixture
def game_handler(mock_manager, registry):
    """Create a game handler with mock manager and a real registry."""
    return GameHandler(mock_manager, registry)
