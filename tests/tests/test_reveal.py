import pytest

from secret_santa.constants import Messages
from secret_santa.schemas.results import PreconditionViolation
from secret_santa.service.assignment_service import AssignmentService
from secret_santa.service.reveal_service import RevealSequencer, RevealState
from tests.constants.data import ThreePlayers


@pytest.fixture
def sequencer(rng):
    result = AssignmentService.generate_assignment(ThreePlayers.participants, rng=rng)
    return RevealSequencer(ThreePlayers.participants, result.assignment)


def test_sequencer_progression(sequencer):
    """
    Scenario

    1. Start revealing for A, B, C
    2. Reveal and advance through every participant
    3. Check cursor states and the terminal state
    """
    assert sequencer.state() == RevealState(0, False)

    sequencer.reveal()
    assert sequencer.state() == RevealState(0, True)

    sequencer.advance()
    assert sequencer.state() == RevealState(1, False)
    assert sequencer.current_participant() == "B"

    sequencer.reveal()
    sequencer.advance()
    sequencer.reveal()

    assert sequencer.state() == RevealState(2, True)
    assert sequencer.is_terminal()

    sequencer.advance()
    assert sequencer.state() == RevealState(2, True), "advance after the end moved"


def test_recipient_hidden_until_revealed(sequencer):
    assert sequencer.current_participant() == "A"
    assert sequencer.current_assignment() is None

    sequencer.reveal()
    recipient = sequencer.current_assignment()

    assert recipient in ("B", "C"), f"{recipient} is not a valid recipient for A"


def test_advance_without_reveal_is_noop(sequencer):
    sequencer.advance()

    assert sequencer.state() == RevealState(0, False)
    assert not sequencer.is_terminal()


def test_reveal_is_idempotent(sequencer):
    sequencer.reveal()
    once = (sequencer.state(), sequencer.current_assignment())
    sequencer.reveal()
    twice = (sequencer.state(), sequencer.current_assignment())

    assert once == twice, f"{once} not equal to {twice}"


def test_every_recipient_revealed_once(sequencer):
    recipients = []
    while True:
        sequencer.reveal()
        recipients.append(sequencer.current_assignment())
        if sequencer.is_terminal():
            break
        sequencer.advance()

    assert sorted(recipients) == ThreePlayers.participants, f"{recipients}"


def test_reset_discards_assignment(sequencer):
    sequencer.reveal()
    sequencer.reset()

    assert not sequencer.is_active()
    assert not sequencer.is_terminal()
    with pytest.raises(ValueError, match=Messages.NO_ACTIVE_ASSIGNMENT):
        sequencer.current_participant()
    with pytest.raises(ValueError, match=Messages.NO_ACTIVE_ASSIGNMENT):
        sequencer.current_assignment()

    sequencer.advance()
    assert sequencer.state() == RevealState(0, False)


def test_assignment_must_cover_participants():
    with pytest.raises(PreconditionViolation):
        RevealSequencer(["A", "B", "C"], {"A": "B", "B": "A"})
    with pytest.raises(PreconditionViolation):
        RevealSequencer([], {})


def test_assignment_must_be_valid_bijection():
    with pytest.raises(PreconditionViolation):
        RevealSequencer(["A", "B"], {"A": "A", "B": "B"})
    with pytest.raises(PreconditionViolation):
        RevealSequencer(["A", "B", "C"], {"A": "B", "B": "A", "C": "A"})
