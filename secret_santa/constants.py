MIN_PARTICIPANTS = 2
DEFAULT_RETRY_BUDGET = 100
DEFAULT_MAX_GAMES = 1000
DEFAULT_GAME_IDLE_SECONDS = 24 * 60 * 60


class GamePhase:
    EDITING = "editing"
    ASSIGNMENT = "assignment"
    REVEAL = "reveal"
    ALL = [EDITING, ASSIGNMENT, REVEAL]


class AssignmentStrategy:
    GREEDY = "greedy"
    VERIFIED = "verified"
    MATCHING = "matching"
    CONFIGURABLE = [GREEDY, VERIFIED]


class ErrorKind:
    INSUFFICIENT_PARTICIPANTS = "insufficient_participants"
    INFEASIBLE = "infeasible"
    ALL = [INSUFFICIENT_PARTICIPANTS, INFEASIBLE]


class Messages:
    INSUFFICIENT_PARTICIPANTS = "Please add at least 2 participants"
    INFEASIBLE = (
        "Could not find valid assignments. Please try again or adjust restrictions."
    )
    BLANK_NAME = "Participant name can't be blank"
    DUPLICATE_NAME = "Participant with this name already exists"
    UNKNOWN_PARTICIPANT = "Participant not found"
    SELF_RESTRICTION = "A participant can't be restricted from themselves"
    NO_ACTIVE_ASSIGNMENT = "There is no active assignment"
    WRONG_PHASE = "This action is not available in the {phase} phase"
    GAME_NOT_FOUND = "Game not found"

    BY_ERROR_KIND = {
        ErrorKind.INSUFFICIENT_PARTICIPANTS: INSUFFICIENT_PARTICIPANTS,
        ErrorKind.INFEASIBLE: INFEASIBLE,
    }
