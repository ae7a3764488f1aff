import logging
import random
import threading
import time
import uuid
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from secret_santa.constants import ErrorKind, GamePhase, MIN_PARTICIPANTS, Messages
from secret_santa.core import environs
from secret_santa.schemas.model import ParticipantModel
from secret_santa.schemas.results import AssignmentResult, PhaseResult
from secret_santa.service.assignment_service import AssignmentService
from secret_santa.service.reveal_service import RevealSequencer

logger = logging.getLogger(__name__)


class GameSession:
    """
    One Secret Santa game: editing, then assignment, then reveal.

    Participants and restrictions can be edited until an assignment is
    found; after that the assignment and reveal cursor only move forward
    until reset() starts everything over with an empty model. All public
    methods hold the session lock, so concurrent callers are serialized.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        retry_budget: Optional[int] = None,
        strategy: Optional[str] = None,
    ):
        self.id = session_id or uuid.uuid4().hex
        self.retry_budget = retry_budget
        self.strategy = strategy
        self._lock = threading.RLock()
        self._model = ParticipantModel()
        self._phase = GamePhase.EDITING
        self._sequencer: Optional[RevealSequencer] = None
        self._last_result: Optional[AssignmentResult] = None

    @property
    def phase(self) -> str:
        return self._phase

    @property
    def model(self) -> ParticipantModel:
        return self._model

    @property
    def last_result(self) -> Optional[AssignmentResult]:
        return self._last_result

    def _require_phase(self, *phases: str) -> None:
        if self._phase not in phases:
            raise ValueError(Messages.WRONG_PHASE.format(phase=self._phase))

    def _edit(self, operation, *args) -> ParticipantModel:
        with self._lock:
            self._require_phase(GamePhase.EDITING, GamePhase.ASSIGNMENT)
            self._model = operation(self._model, *args)
            return self._model

    def add_participant(self, name: str) -> ParticipantModel:
        return self._edit(ParticipantModel.add_participant, name)

    def remove_participant(self, name: str) -> ParticipantModel:
        return self._edit(ParticipantModel.remove_participant, name)

    def rename_participant(self, name: str, new_name: str) -> ParticipantModel:
        return self._edit(ParticipantModel.rename_participant, name, new_name)

    def move_participant(self, name: str, index: int) -> ParticipantModel:
        return self._edit(ParticipantModel.move_participant, name, index)

    def toggle_restriction(self, giver: str, restricted: str) -> ParticipantModel:
        return self._edit(ParticipantModel.toggle_restriction, giver, restricted)

    def load_model(self, model: ParticipantModel) -> ParticipantModel:
        """Replaces the whole draft, e.g. with a filled-in form"""
        return self._edit(lambda _, new_model: new_model, model)

    def start_game(self) -> PhaseResult:
        """Drops blank and repeated entries and moves on to assignment"""
        with self._lock:
            self._require_phase(GamePhase.EDITING)
            participants = self._model.active_participants()
            if len(participants) < MIN_PARTICIPANTS:
                return PhaseResult(
                    phase=self._phase, error=ErrorKind.INSUFFICIENT_PARTICIPANTS
                )

            self._model = ParticipantModel(
                participants=tuple(participants),
                restrictions=self._model.active_restrictions(),
            )
            self._phase = GamePhase.ASSIGNMENT
            logger.info(
                "Game %s started with %d participants", self.id, len(participants)
            )
            return PhaseResult(phase=self._phase)

    def back_to_editing(self) -> PhaseResult:
        with self._lock:
            self._require_phase(GamePhase.ASSIGNMENT)
            self._phase = GamePhase.EDITING
            return PhaseResult(phase=self._phase)

    def _prepare_assignment(self) -> Optional[PhaseResult]:
        self._require_phase(GamePhase.ASSIGNMENT)
        if len(self._model.active_participants()) < MIN_PARTICIPANTS:
            self._phase = GamePhase.EDITING
            return PhaseResult(
                phase=self._phase, error=ErrorKind.INSUFFICIENT_PARTICIPANTS
            )
        return None

    def _apply_assignment(self, result: AssignmentResult) -> PhaseResult:
        self._last_result = result
        details = {"strategy": result.strategy, "attempts": result.attempts}
        if not result.ok:
            details["exhaustive"] = result.exhaustive
            logger.info("Game %s: no valid assignment found", self.id)
            return PhaseResult(phase=self._phase, error=result.error, details=details)

        self._sequencer = RevealSequencer(
            self._model.active_participants(), result.assignment
        )
        self._phase = GamePhase.REVEAL
        logger.info("Game %s: assignment ready, reveal started", self.id)
        return PhaseResult(phase=self._phase, details=details)

    def generate_assignment(self, rng: Optional[random.Random] = None) -> PhaseResult:
        with self._lock:
            failure = self._prepare_assignment()
            if failure is not None:
                return failure
            result = AssignmentService.generate_assignment(
                self._model.active_participants(),
                self._model.active_restrictions(),
                rng=rng,
                retry_budget=self.retry_budget,
                strategy=self.strategy,
            )
            return self._apply_assignment(result)

    async def generate_assignment_async(
        self, rng: Optional[random.Random] = None
    ) -> PhaseResult:
        """
        Awaitable variant of generate_assignment.

        The session lock is a thread lock, so the whole call runs in the
        worker thread pool rather than holding the lock across an await.
        """
        return await run_in_threadpool(self.generate_assignment, rng)

    def _reveal_sequencer(self) -> RevealSequencer:
        self._require_phase(GamePhase.REVEAL)
        return self._sequencer

    def reveal(self) -> None:
        with self._lock:
            self._reveal_sequencer().reveal()

    def advance(self) -> None:
        with self._lock:
            self._reveal_sequencer().advance()

    def current_participant(self) -> str:
        with self._lock:
            return self._reveal_sequencer().current_participant()

    def current_assignment(self) -> Optional[str]:
        with self._lock:
            return self._reveal_sequencer().current_assignment()

    def is_terminal(self) -> bool:
        with self._lock:
            return self._phase == GamePhase.REVEAL and self._sequencer.is_terminal()

    def reset(self) -> PhaseResult:
        """Start over: forgets the assignment, participants and restrictions"""
        with self._lock:
            if self._sequencer is not None:
                self._sequencer.reset()
            self._sequencer = None
            self._last_result = None
            self._model = ParticipantModel()
            self._phase = GamePhase.EDITING
            logger.info("Game %s reset", self.id)
            return PhaseResult(phase=self._phase)

    def snapshot(self) -> dict:
        """Renderer view of the game, never includes the whole assignment"""
        with self._lock:
            data = {
                "id": self.id,
                "phase": self._phase,
                "participants": list(self._model.participants),
                "restrictions": [
                    {"giver": r.giver, "restricted": r.restricted}
                    for r in self._model.sorted_restrictions()
                ],
                "reveal": None,
            }
            if self._phase == GamePhase.REVEAL:
                sequencer = self._sequencer
                data["reveal"] = {
                    "cursor": sequencer.cursor,
                    "revealed": sequencer.revealed,
                    "terminal": sequencer.is_terminal(),
                    "participant_count": sequencer.participant_count,
                    "participant": sequencer.current_participant(),
                    "recipient": sequencer.current_assignment(),
                }
            return data


class GameStore:
    """
    In-memory registry of game sessions, lost when the process exits.

    Games untouched for longer than idle_seconds are evicted when a new game
    is created; past max_games the least recently used game makes room.
    """

    def __init__(
        self,
        retry_budget: Optional[int] = None,
        strategy: Optional[str] = None,
        max_games: Optional[int] = None,
        idle_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.retry_budget = retry_budget
        self.strategy = strategy
        self.max_games = max_games if max_games is not None else environs.MAX_GAMES
        self.idle_seconds = (
            idle_seconds if idle_seconds is not None else environs.GAME_IDLE_SECONDS
        )
        self._clock = clock
        self._games: "OrderedDict[str, GameSession]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _evict(self) -> None:
        now = self._clock()
        idle = [
            game_id
            for game_id, seen in self._last_seen.items()
            if now - seen > self.idle_seconds
        ]
        for game_id in idle:
            self._forget(game_id)
        while self._games and len(self._games) >= self.max_games:
            self._forget(next(iter(self._games)))
        if idle:
            logger.info("Evicted %d idle game(s)", len(idle))

    def _forget(self, game_id: str) -> None:
        self._games.pop(game_id, None)
        self._last_seen.pop(game_id, None)
        logger.debug("Game %s evicted", game_id)

    def create(self) -> GameSession:
        game = GameSession(
            retry_budget=self.retry_budget
            if self.retry_budget is not None
            else environs.RETRY_BUDGET,
            strategy=self.strategy or environs.ASSIGNMENT_STRATEGY,
        )
        with self._lock:
            self._evict()
            self._games[game.id] = game
            self._last_seen[game.id] = self._clock()
        logger.debug("Game %s created", game.id)
        return game

    def get(self, game_id: str) -> GameSession:
        with self._lock:
            try:
                game = self._games[game_id]
            except KeyError:
                raise KeyError(Messages.GAME_NOT_FOUND)
            self._games.move_to_end(game_id)
            self._last_seen[game_id] = self._clock()
            return game

    def delete(self, game_id: str) -> None:
        with self._lock:
            if self._games.pop(game_id, None) is None:
                raise KeyError(Messages.GAME_NOT_FOUND)
            self._last_seen.pop(game_id, None)
        logger.debug("Game %s deleted", game_id)

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._games)

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
