from typing import Callable

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse, Response

from secret_santa.dependencies import get_game, get_store
from secret_santa.schemas.requests import (
    ParticipantCreate,
    ParticipantMove,
    ParticipantRename,
    RestrictionToggle,
)
from secret_santa.schemas.results import PhaseResult
from secret_santa.service.game_service import GameSession, GameStore

router = APIRouter()


def _error(message: str) -> JSONResponse:
    return JSONResponse({"detail": message}, status_code=400)


def _run(game: GameSession, action: Callable, *args) -> JSONResponse:
    """Applies an editing or reveal action and answers with the new snapshot"""
    try:
        action(*args)
    except ValueError as e:
        return _error(str(e))
    return JSONResponse(game.snapshot())


def _phase_response(game: GameSession, result: PhaseResult) -> JSONResponse:
    body = {
        "ok": result.ok,
        "error": result.error,
        "message": result.message,
        "details": result.details,
        "game": game.snapshot(),
    }
    return JSONResponse(body)


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.post("/games", status_code=201)
async def create_game(store: GameStore = Depends(get_store)):
    """Creates an empty game in the editing phase"""
    game = store.create()
    return JSONResponse(game.snapshot(), status_code=201)


@router.get("/games/{game_id}")
async def read_game(game: GameSession = Depends(get_game)):
    return JSONResponse(game.snapshot())


@router.delete("/games/{game_id}", status_code=204)
async def delete_game(
    game: GameSession = Depends(get_game), store: GameStore = Depends(get_store)
):
    store.delete(game.id)
    return Response(status_code=204)


@router.post("/games/{game_id}/participants")
async def add_participant(
    data: ParticipantCreate, game: GameSession = Depends(get_game)
):
    return _run(game, game.add_participant, data.name)


# Names may contain "/", so the name segment is a path parameter and the
# move route goes first.
@router.post("/games/{game_id}/participants/{name:path}/move")
async def move_participant(
    name: str, data: ParticipantMove, game: GameSession = Depends(get_game)
):
    return _run(game, game.move_participant, name, data.index)


@router.put("/games/{game_id}/participants/{name:path}")
async def rename_participant(
    name: str, data: ParticipantRename, game: GameSession = Depends(get_game)
):
    return _run(game, game.rename_participant, name, data.name)


@router.delete("/games/{game_id}/participants/{name:path}")
async def remove_participant(name: str, game: GameSession = Depends(get_game)):
    """Removes a participant and every restriction naming them"""
    return _run(game, game.remove_participant, name)


@router.post("/games/{game_id}/restrictions/toggle")
async def toggle_restriction(
    data: RestrictionToggle, game: GameSession = Depends(get_game)
):
    return _run(game, game.toggle_restriction, data.giver, data.restricted)


@router.get("/games/{game_id}/restrictions/grid")
async def restriction_grid(game: GameSession = Depends(get_game)):
    model = game.model
    return JSONResponse(
        {
            "participants": model.active_participants(),
            "grid": model.restriction_grid(),
        }
    )


@router.post("/games/{game_id}/start")
async def start_game(game: GameSession = Depends(get_game)):
    try:
        result = game.start_game()
    except ValueError as e:
        return _error(str(e))
    return _phase_response(game, result)


@router.post("/games/{game_id}/edit")
async def back_to_editing(game: GameSession = Depends(get_game)):
    try:
        result = game.back_to_editing()
    except ValueError as e:
        return _error(str(e))
    return _phase_response(game, result)


@router.post("/games/{game_id}/assign")
async def generate_assignment(game: GameSession = Depends(get_game)):
    """Draws the assignment, an infeasible draw keeps the game in assignment"""
    try:
        result = await game.generate_assignment_async()
    except ValueError as e:
        return _error(str(e))
    return _phase_response(game, result)


@router.post("/games/{game_id}/reveal")
async def reveal(game: GameSession = Depends(get_game)):
    return _run(game, game.reveal)


@router.post("/games/{game_id}/advance")
async def advance(game: GameSession = Depends(get_game)):
    return _run(game, game.advance)


@router.post("/games/{game_id}/reset")
async def reset_game(game: GameSession = Depends(get_game)):
    """Start over with an empty list of participants"""
    return _phase_response(game, game.reset())
