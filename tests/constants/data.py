class ThreePlayers:
    participants = ["A", "B", "C"]


class MutualRestriction:
    participants = ["A", "B"]
    restrictions = [("A", "B"), ("B", "A")]


class FamilyGame:
    participants = ["Alice", "Bob", "Carol", "Dave"]
    restrictions = [("Alice", "Bob")]
    runs = 1000


class Seeds:
    fixed = 2024
    other = 7
