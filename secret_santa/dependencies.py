from fastapi import HTTPException, Request

from secret_santa.service.game_service import GameSession, GameStore


def get_store(request: Request) -> GameStore:
    return request.app.state.store


def get_game(game_id: str, request: Request) -> GameSession:
    try:
        return get_store(request).get(game_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=e.args[0])
