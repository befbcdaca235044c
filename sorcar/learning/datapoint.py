"""
Datapoints and Horn constraints of one learning round.

A round's corpus is an arena: a list of ``Datapoint`` objects plus a list of
``HornConstraint`` objects whose premises and conclusion are *indices* into
the datapoint list. Nothing in the learner copies or mutates the arena;
algorithms keep their own transient working lists of indices.

    datapoints = [dp_0, dp_1, dp_2]
    HornConstraint(premises=(0, 1), conclusion=2)    # dp_0 ∧ dp_1 → dp_2
    HornConstraint(premises=(2,), conclusion=None)   # ¬dp_2
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional, Sequence, Tuple

from ..errors import InvalidArgumentError


@dataclass(frozen=True)
class Datapoint:
    """
    One observed program state.

    ``values[i]`` is the truth value of attribute (predicate) ``i``;
    ``location`` selects the per-location conjunction the state is checked
    against. ``classification`` is only meaningful when ``is_classified``.
    """
    location: int
    values: Tuple[bool, ...]
    is_classified: bool = False
    classification: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(bool(v) for v in self.values))

    @staticmethod
    def positive(location: int, values: Iterable) -> "Datapoint":
        return Datapoint(location, tuple(values), True, True)

    @staticmethod
    def negative(location: int, values: Iterable) -> "Datapoint":
        return Datapoint(location, tuple(values), True, False)

    @staticmethod
    def unclassified(location: int, values: Iterable) -> "Datapoint":
        return Datapoint(location, tuple(values), False, False)

    @property
    def is_positive(self) -> bool:
        return self.is_classified and self.classification

    @property
    def is_negative(self) -> bool:
        return self.is_classified and not self.classification

    def __str__(self) -> str:
        bits = "".join("1" if v else "0" for v in self.values)
        if not self.is_classified:
            label = "?"
        else:
            label = "+" if self.classification else "-"
        return f"dp@{self.location}[{bits}]{label}"


@dataclass(frozen=True)
class HornConstraint:
    """
    Implication between datapoints: all premises in the invariant implies the
    conclusion is in the invariant. A missing conclusion means the premises
    must never all be accepted.
    """
    premises: Tuple[int, ...]
    conclusion: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "premises", tuple(self.premises))

    def __str__(self) -> str:
        lhs = " ∧ ".join(f"#{p}" for p in self.premises) or "true"
        rhs = f"#{self.conclusion}" if self.conclusion is not None else "false"
        return f"{lhs} → {rhs}"


def validate_corpus(datapoints: Sequence[Datapoint],
                    horn_constraints: Sequence[HornConstraint],
                    conjunctions: Sequence[AbstractSet[int]]) -> None:
    """
    Check that every datapoint location indexes the conjunction vector, that
    every datapoint has a value for each attribute of its location's
    conjunction, and that every constraint only references existing
    datapoints.

    Raises InvalidArgumentError; never mutates anything.
    """
    location_count = len(conjunctions)
    for i, dp in enumerate(datapoints):
        if not 0 <= dp.location < location_count:
            raise InvalidArgumentError(
                f"Datapoint #{i} has location {dp.location}, "
                f"expected 0..{location_count - 1}"
            )
        conjunction = conjunctions[dp.location]
        if conjunction and len(dp.values) <= max(conjunction):
            raise InvalidArgumentError(
                f"Datapoint #{i} has {len(dp.values)} values, location "
                f"{dp.location} uses attribute {max(conjunction)}"
            )

    n = len(datapoints)
    for j, hc in enumerate(horn_constraints):
        for p in hc.premises:
            if not 0 <= p < n:
                raise InvalidArgumentError(
                    f"Horn constraint #{j} references unknown premise #{p}"
                )
        if hc.conclusion is not None and not 0 <= hc.conclusion < n:
            raise InvalidArgumentError(
                f"Horn constraint #{j} references unknown conclusion #{hc.conclusion}"
            )


def classified_split(datapoints: Sequence[Datapoint]) -> Tuple[List[int], List[int]]:
    """Indices of positive and negative datapoints, in corpus order."""
    positive = [i for i, dp in enumerate(datapoints) if dp.is_positive]
    negative = [i for i, dp in enumerate(datapoints) if dp.is_negative]
    return positive, negative
