import random

import anyio
import pytest

from secret_santa.constants import AssignmentStrategy, ErrorKind
from secret_santa.core import environs
from secret_santa.schemas.model import Restriction
from secret_santa.schemas.results import PreconditionViolation
from secret_santa.service.assignment_service import AssignmentService
from tests.constants.data import FamilyGame, MutualRestriction, Seeds, ThreePlayers


def assert_valid(assignment, participants, restrictions=()):
    assert sorted(assignment) == sorted(participants), f"{assignment} misses givers"
    assert sorted(assignment.values()) == sorted(
        participants
    ), f"{assignment} is not a bijection"
    for giver, recipient in assignment.items():
        assert giver != recipient, f"{giver} gifts to themselves"
        assert (giver, recipient) not in restrictions, f"{giver} -> {recipient}"


def test_assignment_is_valid(rng):
    """
    Scenario

    1. Draw for four participants with one restriction
    2. Check bijection, no self-gift and restriction respect
    """
    result = AssignmentService.generate_assignment(
        FamilyGame.participants, FamilyGame.restrictions, rng=rng
    )

    assert result.ok, f"{result.error} is not None"
    assert result.strategy == AssignmentStrategy.GREEDY
    assert result.attempts >= 1
    assert_valid(result.assignment, FamilyGame.participants, FamilyGame.restrictions)


def test_two_participants_swap(rng):
    result = AssignmentService.generate_assignment(["A", "B"], rng=rng)

    assert result.assignment == {"A": "B", "B": "A"}, f"{result.assignment}"


def test_same_seed_same_assignment():
    """
    Scenario

    1. Draw twice with identically seeded random sources
    2. Check both draws are equal
    """
    first = AssignmentService.generate_assignment(
        FamilyGame.participants,
        FamilyGame.restrictions,
        rng=random.Random(Seeds.fixed),
    )
    second = AssignmentService.generate_assignment(
        FamilyGame.participants,
        FamilyGame.restrictions,
        rng=random.Random(Seeds.fixed),
    )

    assert first == second, f"{first} not equal to {second}"


def test_mutual_restriction_is_infeasible(rng):
    """
    Scenario

    1. Two participants restricted from each other
    2. Check the draw reports infeasible instead of raising
    """
    result = AssignmentService.generate_assignment(
        MutualRestriction.participants, MutualRestriction.restrictions, rng=rng
    )

    assert not result.ok
    assert result.error == ErrorKind.INFEASIBLE, f"{result.error}"
    assert result.assignment is None
    assert (
        result.attempts == environs.RETRY_BUDGET
    ), f"{result.attempts} not equal to {environs.RETRY_BUDGET}"
    assert not result.exhaustive


def test_zero_budget_forces_infeasible(rng):
    result = AssignmentService.generate_assignment(
        ThreePlayers.participants, rng=rng, retry_budget=0
    )

    assert result.error == ErrorKind.INFEASIBLE
    assert result.attempts == 0


def test_verified_strategy_finds_matching_without_greedy_attempts(rng):
    """
    Scenario

    1. Draw with the verified strategy and no greedy attempts
    2. Check the matching fallback produced a valid assignment
    """
    result = AssignmentService.generate_assignment(
        FamilyGame.participants,
        FamilyGame.restrictions,
        rng=rng,
        retry_budget=0,
        strategy=AssignmentStrategy.VERIFIED,
    )

    assert result.ok, f"{result.error} is not None"
    assert result.strategy == AssignmentStrategy.MATCHING
    assert_valid(result.assignment, FamilyGame.participants, FamilyGame.restrictions)


def test_verified_strategy_proves_infeasibility(rng):
    """Nobody but Carol could give to Carol"""
    participants = ["Alice", "Bob", "Carol"]
    restrictions = [("Alice", "Carol"), ("Bob", "Carol")]

    result = AssignmentService.generate_assignment(
        participants,
        restrictions,
        rng=rng,
        strategy=AssignmentStrategy.VERIFIED,
    )

    assert result.error == ErrorKind.INFEASIBLE
    assert result.strategy == AssignmentStrategy.MATCHING
    assert result.exhaustive


def test_unknown_names_in_restrictions_are_ignored(rng):
    restrictions = [("A", "Zed"), ("Zed", "B"), Restriction("A", "B")]

    result = AssignmentService.generate_assignment(
        ThreePlayers.participants, restrictions, rng=rng
    )

    assert result.ok
    assert result.assignment == {"A": "C", "B": "A", "C": "B"}, f"{result.assignment}"


@pytest.mark.parametrize(
    "participants",
    [[], ["A"], ["A", "A", "B"], ["A", " "], ["A", ""], ["A", None]],
)
def test_invalid_participants_fail_fast(participants):
    with pytest.raises(PreconditionViolation):
        AssignmentService.generate_assignment(participants)


def test_invalid_budget_and_strategy_fail_fast():
    with pytest.raises(PreconditionViolation):
        AssignmentService.generate_assignment(ThreePlayers.participants, retry_budget=-1)
    with pytest.raises(PreconditionViolation):
        AssignmentService.generate_assignment(
            ThreePlayers.participants, strategy="backtracking"
        )


def test_check_assignment():
    participants = ThreePlayers.participants

    assert AssignmentService.check_assignment(
        {"A": "B", "B": "C", "C": "A"}, participants
    )
    assert not AssignmentService.check_assignment(
        {"A": "B", "B": "C", "C": "A"}, participants, [("C", "A")]
    )
    assert not AssignmentService.check_assignment(
        {"A": "A", "B": "C", "C": "B"}, participants
    )
    assert not AssignmentService.check_assignment(
        {"A": "B", "B": "A", "C": "A"}, participants
    )
    assert not AssignmentService.check_assignment({"A": "B", "B": "A"}, participants)


def test_async_wrapper_matches_sync_call():
    result = anyio.run(
        AssignmentService.generate_assignment_async,
        FamilyGame.participants,
        FamilyGame.restrictions,
        random.Random(Seeds.fixed),
    )
    expected = AssignmentService.generate_assignment(
        FamilyGame.participants,
        FamilyGame.restrictions,
        rng=random.Random(Seeds.fixed),
    )

    assert result == expected, f"{result} not equal to {expected}"


def test_thousand_seeded_draws_respect_restriction():
    """
    Scenario

    1. Draw 1000 times for Alice, Bob, Carol and Dave with different seeds
    2. Check every draw is valid and Alice never gifts to Bob
    """
    for seed in range(FamilyGame.runs):
        result = AssignmentService.generate_assignment(
            FamilyGame.participants,
            FamilyGame.restrictions,
            rng=random.Random(seed),
        )

        assert result.ok, f"seed {seed}: {result.error}"
        assert_valid(
            result.assignment, FamilyGame.participants, FamilyGame.restrictions
        )
        assert result.assignment["Alice"] != "Bob", f"seed {seed}"
