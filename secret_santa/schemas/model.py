from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, List, Optional, Tuple

from secret_santa.constants import Messages


@dataclass(frozen=True)
class Restriction:
    giver: str
    restricted: str

    def involves(self, name: str) -> bool:
        return name in (self.giver, self.restricted)

    def as_pair(self) -> Tuple[str, str]:
        return self.giver, self.restricted


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError(Messages.BLANK_NAME)
    return cleaned


@dataclass(frozen=True)
class ParticipantModel:
    """
    Participants and restrictions of the editing phase.

    The model is a value: every editing operation returns a new model and
    leaves the original untouched. Participants may hold draft entries
    (blank or repeated names typed into a form); active_participants()
    is what gets fed to the assignment engine.
    """

    participants: Tuple[str, ...] = ()
    restrictions: FrozenSet[Restriction] = field(default_factory=frozenset)

    @classmethod
    def from_entries(
        cls,
        names: Iterable[str],
        restrictions: Iterable[Tuple[str, str]] = (),
    ) -> "ParticipantModel":
        """Builds a draft model from raw form entries"""
        pairs = frozenset(
            Restriction(giver.strip(), restricted.strip())
            for giver, restricted in restrictions
            if giver and restricted and giver.strip() and restricted.strip()
        )
        return cls(participants=tuple(names), restrictions=pairs)

    def active_participants(self) -> List[str]:
        """Trimmed non-blank names, first occurrence only, in order"""
        seen = set()
        active = []
        for name in self.participants:
            cleaned = (name or "").strip()
            if cleaned and cleaned not in seen:
                seen.add(cleaned)
                active.append(cleaned)
        return active

    def active_restrictions(self) -> FrozenSet[Restriction]:
        active = set(self.active_participants())
        return frozenset(
            r for r in self.restrictions if r.giver in active and r.restricted in active
        )

    def has_participant(self, name: str) -> bool:
        return (name or "").strip() in self.active_participants()

    def _index_of(self, name: str) -> int:
        cleaned = (name or "").strip()
        for index, existing in enumerate(self.participants):
            if (existing or "").strip() == cleaned:
                return index
        raise ValueError(Messages.UNKNOWN_PARTICIPANT)

    def add_participant(self, name: str) -> "ParticipantModel":
        cleaned = _clean_name(name)
        if self.has_participant(cleaned):
            raise ValueError(Messages.DUPLICATE_NAME)
        return replace(self, participants=self.participants + (cleaned,))

    def remove_participant(self, name: str) -> "ParticipantModel":
        """
        Removes a participant together with every restriction naming them.
        Repeated draft entries of the same name go as well.
        """
        index = self._index_of(name)
        removed = (self.participants[index] or "").strip()
        participants = tuple(
            entry for entry in self.participants if (entry or "").strip() != removed
        )
        restrictions = frozenset(r for r in self.restrictions if not r.involves(removed))
        return replace(self, participants=participants, restrictions=restrictions)

    def rename_participant(self, name: str, new_name: str) -> "ParticipantModel":
        index = self._index_of(name)
        old = (self.participants[index] or "").strip()
        new = _clean_name(new_name)
        if new == old:
            return self
        if self.has_participant(new):
            raise ValueError(Messages.DUPLICATE_NAME)

        # repeated draft entries of the old name collapse into the renamed one
        participants = [
            new if position == index else entry
            for position, entry in enumerate(self.participants)
            if position == index or (entry or "").strip() != old
        ]
        restrictions = frozenset(
            Restriction(
                new if r.giver == old else r.giver,
                new if r.restricted == old else r.restricted,
            )
            for r in self.restrictions
        )
        return replace(
            self, participants=tuple(participants), restrictions=restrictions
        )

    def move_participant(self, name: str, index: int) -> "ParticipantModel":
        """Moves a participant to a new position, the index is clamped"""
        current = self._index_of(name)
        participants = list(self.participants)
        moved = participants.pop(current)
        target = max(0, min(index, len(participants)))
        participants.insert(target, moved)
        return replace(self, participants=tuple(participants))

    def is_restricted(self, giver: str, restricted: str) -> bool:
        return Restriction(giver.strip(), restricted.strip()) in self.restrictions

    def add_restriction(self, giver: str, restricted: str) -> "ParticipantModel":
        restriction = self._restriction(giver, restricted)
        if restriction in self.restrictions:
            return self
        return replace(self, restrictions=self.restrictions | {restriction})

    def remove_restriction(self, giver: str, restricted: str) -> "ParticipantModel":
        restriction = self._restriction(giver, restricted)
        if restriction not in self.restrictions:
            return self
        return replace(self, restrictions=self.restrictions - {restriction})

    def toggle_restriction(self, giver: str, restricted: str) -> "ParticipantModel":
        if self.is_restricted(giver, restricted):
            return self.remove_restriction(giver, restricted)
        return self.add_restriction(giver, restricted)

    @staticmethod
    def _restriction(giver: str, restricted: str) -> Restriction:
        giver, restricted = _clean_name(giver), _clean_name(restricted)
        if giver == restricted:
            raise ValueError(Messages.SELF_RESTRICTION)
        return Restriction(giver, restricted)

    def restriction_grid(self) -> List[List[Optional[bool]]]:
        """
        Rows are givers, columns are receivers, both in participant order.
        The diagonal is None since nobody can be assigned to themselves.
        """
        names = self.active_participants()
        return [
            [
                None if giver == receiver else self.is_restricted(giver, receiver)
                for receiver in names
            ]
            for giver in names
        ]

    def sorted_restrictions(self) -> List[Restriction]:
        order = {name: index for index, name in enumerate(self.active_participants())}
        return sorted(
            self.restrictions,
            key=lambda r: (
                order.get(r.giver, len(order)),
                order.get(r.restricted, len(order)),
                r.giver,
                r.restricted,
            ),
        )
