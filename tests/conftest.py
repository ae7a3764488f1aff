import random

import pytest
from fastapi.testclient import TestClient

from secret_santa.constants import AssignmentStrategy
from secret_santa.service.game_service import GameSession, GameStore
from secret_santa.web.main import create_app
from tests.constants.data import FamilyGame, Seeds


@pytest.fixture
def rng():
    return random.Random(Seeds.fixed)


@pytest.fixture
def game():
    return GameSession(retry_budget=100, strategy=AssignmentStrategy.GREEDY)


@pytest.fixture
def family_game(game):
    for name in FamilyGame.participants:
        game.add_participant(name)
    for giver, restricted in FamilyGame.restrictions:
        game.toggle_restriction(giver, restricted)
    return game


@pytest.fixture
def started_family_game(family_game):
    family_game.start_game()
    return family_game


@pytest.fixture
def revealing_family_game(started_family_game, rng):
    started_family_game.generate_assignment(rng)
    return started_family_game


@pytest.fixture
def store():
    return GameStore(retry_budget=100, strategy=AssignmentStrategy.GREEDY)


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as test_client:
        yield test_client
