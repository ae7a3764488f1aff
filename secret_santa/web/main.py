from typing import Optional

from fastapi import FastAPI

from secret_santa.core import environs
from secret_santa.core.logging import configure_logging
from secret_santa.service.game_service import GameStore
from secret_santa.web import routes


def create_app(store: Optional[GameStore] = None) -> FastAPI:
    """
    Factory for creating a FastAPI Secret Santa application

    :param store: game registry, a fresh in-memory one when omitted
    """
    configure_logging()
    app = FastAPI(title="SecretSanta", debug=environs.LOG_LEVEL.upper() == "DEBUG")
    app.state.store = store if store is not None else GameStore()
    app.include_router(routes.router)
    return app
