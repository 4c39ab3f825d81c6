"""FastAPI main application."""

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.game_handler import GameHandler
from app.api.routes import router
from app.api.websocket import ConnectionManager
from app.config import Settings, settings
from app.services.room_registry import RoomRegistry

# Configure logging for the app (must be after imports but before app usage)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)
logging.getLogger("app").setLevel(settings.log_level.upper())
logger = logging.getLogger(__name__)


def create_app(config: Settings | None = None) -> FastAPI:
    """Build the application with its own registry and connection manager.

    Args:
        config: Settings to use, the environment-loaded ones by default

    Returns:
        Configured FastAPI app

    """
    config = config or settings

    app = FastAPI(
        title="Trick Game API",
        description="Real-time multiplayer trick-taking card game server",
        version="1.0.0",
    )

    # Room state lives for the life of the process, owned by this app
    app.state.settings = config
    app.state.registry = RoomRegistry(config)
    app.state.connection_manager = ConnectionManager()
    app.state.game_handler = GameHandler(app.state.connection_manager, app.state.registry)
    app.state.connection_manager.set_game_handler(app.state.game_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(router)

    logger.info("App created (environment=%s)", config.environment)
    return app


app = create_app()


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info",
    )


if __name__ == "__main__":
    main()
