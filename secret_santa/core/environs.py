from environs import Env

from secret_santa.constants import (
    AssignmentStrategy,
    DEFAULT_GAME_IDLE_SECONDS,
    DEFAULT_MAX_GAMES,
    DEFAULT_RETRY_BUDGET,
)

env = Env()
env.read_env()

with env.prefixed("SANTA_"):
    RETRY_BUDGET = env.int("RETRY_BUDGET", DEFAULT_RETRY_BUDGET)
    ASSIGNMENT_STRATEGY = env.str("ASSIGNMENT_STRATEGY", AssignmentStrategy.GREEDY)
    MAX_GAMES = env.int("MAX_GAMES", DEFAULT_MAX_GAMES)
    GAME_IDLE_SECONDS = env.float("GAME_IDLE_SECONDS", DEFAULT_GAME_IDLE_SECONDS)
    LOG_LEVEL = env.str("LOG_LEVEL", "INFO")
    LOG_JSON = env.bool("LOG_JSON", True)
    HOST = env.str("HOST", "127.0.0.1")
    PORT = env.int("PORT", 8005)
    RELOAD = env.bool("RELOAD", False)
