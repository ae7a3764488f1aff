import logging
import random
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from starlette.concurrency import run_in_threadpool

from secret_santa.constants import AssignmentStrategy, MIN_PARTICIPANTS
from secret_santa.core import environs
from secret_santa.schemas.model import Restriction
from secret_santa.schemas.results import AssignmentResult, PreconditionViolation

logger = logging.getLogger(__name__)

RestrictionLike = Union[Restriction, Tuple[str, str]]


class AssignmentService:
    @staticmethod
    def _validate_participants(participants: List[str]) -> None:
        if len(participants) < MIN_PARTICIPANTS:
            raise PreconditionViolation(
                f"At least {MIN_PARTICIPANTS} participants are required, "
                f"got {len(participants)}"
            )
        for name in participants:
            if not isinstance(name, str) or not name.strip():
                raise PreconditionViolation(f"Blank participant name: {name!r}")
        if len(set(participants)) != len(participants):
            raise PreconditionViolation("Participant names must be unique")

    @staticmethod
    def _restricted_pairs(
        participants: List[str], restrictions: Iterable[RestrictionLike]
    ) -> Set[Tuple[str, str]]:
        """Restriction pairs with both ends present, the rest are inert"""
        names = set(participants)
        pairs = set()
        for restriction in restrictions:
            if isinstance(restriction, Restriction):
                giver, restricted = restriction.as_pair()
            else:
                giver, restricted = restriction
            if giver in names and restricted in names:
                pairs.add((giver, restricted))
        return pairs

    @staticmethod
    def _greedy_attempt(
        participants: List[str],
        restricted: Set[Tuple[str, str]],
        rng: random.Random,
    ) -> Optional[Dict[str, str]]:
        assignment = {}
        remaining = list(participants)

        for giver in participants:
            valid = [
                recipient
                for recipient in remaining
                if recipient != giver and (giver, recipient) not in restricted
            ]
            if not valid:
                return None

            recipient = rng.choice(valid)
            assignment[giver] = recipient
            remaining.remove(recipient)

        return assignment

    @staticmethod
    def _perfect_matching(
        participants: List[str],
        restricted: Set[Tuple[str, str]],
        rng: random.Random,
    ) -> Optional[Dict[str, str]]:
        """
        Augmenting path matching over the giver/recipient compatibility graph

        :return giver -> recipient mapping, or None when no perfect matching exists
        """
        candidates = {}
        for giver in participants:
            options = [
                recipient
                for recipient in participants
                if recipient != giver and (giver, recipient) not in restricted
            ]
            rng.shuffle(options)
            candidates[giver] = options

        giver_of = {}

        def augment(giver: str, visited: Set[str]) -> bool:
            for recipient in candidates[giver]:
                if recipient in visited:
                    continue
                visited.add(recipient)
                if recipient not in giver_of or augment(giver_of[recipient], visited):
                    giver_of[recipient] = giver
                    return True
            return False

        for giver in participants:
            if not augment(giver, set()):
                return None

        return {giver: recipient for recipient, giver in giver_of.items()}

    @staticmethod
    def check_assignment(
        assignment: Dict[str, str],
        participants: List[str],
        restrictions: Iterable[RestrictionLike] = (),
    ) -> bool:
        """Checks bijection, no self-gift and no restricted pair"""
        restricted = AssignmentService._restricted_pairs(participants, restrictions)
        if set(assignment) != set(participants):
            return False
        if sorted(assignment.values()) != sorted(participants):
            return False
        return all(
            giver != recipient and (giver, recipient) not in restricted
            for giver, recipient in assignment.items()
        )

    @staticmethod
    def generate_assignment(
        participants: List[str],
        restrictions: Iterable[RestrictionLike] = (),
        rng: Optional[random.Random] = None,
        retry_budget: Optional[int] = None,
        strategy: Optional[str] = None,
    ) -> AssignmentResult:
        """
        Randomized greedy construction with restart.

        Givers are visited in the given order, each draws uniformly among the
        recipients still free that are neither themselves nor restricted. An
        attempt that dead-ends is dropped and a new one starts from scratch;
        the first complete attempt wins. With the "verified" strategy an
        exhausted budget falls back to a perfect matching search, which
        either finds an assignment or proves none exists.

        :param participants: unique non-blank names
        :param restrictions: (giver, restricted) pairs, unknown names are ignored
        :param rng: random source, a fresh random.Random() when omitted
        :param retry_budget: greedy attempts, defaults to SANTA_RETRY_BUDGET
        :param strategy: "greedy" or "verified", defaults to SANTA_ASSIGNMENT_STRATEGY
        :return AssignmentResult:
        """
        participants = list(participants)
        AssignmentService._validate_participants(participants)

        if retry_budget is None:
            retry_budget = environs.RETRY_BUDGET
        if retry_budget < 0:
            raise PreconditionViolation("Retry budget can't be negative")

        strategy = strategy or environs.ASSIGNMENT_STRATEGY
        if strategy not in AssignmentStrategy.CONFIGURABLE:
            raise PreconditionViolation(f"Unknown assignment strategy: {strategy}")

        if rng is None:
            rng = random.Random()

        restricted = AssignmentService._restricted_pairs(participants, restrictions)

        for attempt in range(1, retry_budget + 1):
            assignment = AssignmentService._greedy_attempt(
                participants, restricted, rng
            )
            if assignment is not None:
                logger.info(
                    "Assignment found for %d participants after %d attempt(s)",
                    len(participants),
                    attempt,
                )
                return AssignmentResult.success(
                    assignment, AssignmentStrategy.GREEDY, attempt
                )
            logger.debug("Attempt %d dead-ended, restarting", attempt)

        if strategy == AssignmentStrategy.GREEDY:
            logger.info(
                "No assignment for %d participants within %d attempt(s)",
                len(participants),
                retry_budget,
            )
            return AssignmentResult.infeasible(AssignmentStrategy.GREEDY, retry_budget)

        assignment = AssignmentService._perfect_matching(participants, restricted, rng)
        if assignment is None:
            logger.info(
                "Restrictions leave no valid assignment for %d participants",
                len(participants),
            )
            return AssignmentResult.infeasible(
                AssignmentStrategy.MATCHING, retry_budget, exhaustive=True
            )

        if not AssignmentService.check_assignment(
            assignment, participants, restricted
        ):
            raise RuntimeError("Matching produced an invalid assignment")

        logger.info(
            "Assignment for %d participants found by matching after %d attempt(s)",
            len(participants),
            retry_budget,
        )
        return AssignmentResult.success(
            assignment, AssignmentStrategy.MATCHING, retry_budget
        )

    @staticmethod
    async def generate_assignment_async(
        participants: List[str],
        restrictions: Iterable[RestrictionLike] = (),
        rng: Optional[random.Random] = None,
        retry_budget: Optional[int] = None,
        strategy: Optional[str] = None,
    ) -> AssignmentResult:
        """Same as generate_assignment, run in the worker thread pool"""
        return await run_in_threadpool(
            AssignmentService.generate_assignment,
            participants,
            list(restrictions),
            rng,
            retry_budget,
            strategy,
        )
