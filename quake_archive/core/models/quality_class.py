"""
QualityClass enum ranking the confidence of a hypocenter solution.
"""

from enum import Enum


class QualityClass(str, Enum):
    """
    Ordered classification of solution confidence, best first.

    The rank is the position in declaration order: S=0 (best) ... D=4 (worst).
    Display filters compare ranks, so lower is better.
    """

    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"

    @property
    def rank(self) -> int:
        return list(QualityClass).index(self)

    @classmethod
    def best(cls) -> "QualityClass":
        return cls.S

    @classmethod
    def worst(cls) -> "QualityClass":
        return cls.D

    @classmethod
    def from_rank(cls, rank: int) -> "QualityClass":
        members = list(cls)
        if not 0 <= rank < len(members):
            raise ValueError(f"Quality rank must be between 0 and {len(members) - 1}, got {rank}")
        return members[rank]
