"""
Conjunction algebra shared by Horndini and the Sorcar variants.

A conjunction is a ``Set[int]`` of attribute indices read as their logical
AND; a list of conjunctions indexed by location is the learner's working
state. This module holds the satisfaction oracle, the R/X set split used
by every Sorcar variant, and the consistency check that every algorithm's
result must pass.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ..errors import InconsistentResultError, InvalidArgumentError
from .datapoint import Datapoint, HornConstraint

logger = logging.getLogger(__name__)

Conjunctions = List[Set[int]]


def satisfies(dp: Datapoint, conjunction: Iterable[int]) -> bool:
    """True iff every attribute in ``conjunction`` holds in ``dp``."""
    values = dp.values
    for c in conjunction:
        if not values[c]:
            return False
    return True


def premises_satisfied(hc: HornConstraint,
                       datapoints: Sequence[Datapoint],
                       conjunctions: Sequence[Set[int]]) -> bool:
    """True iff every premise of ``hc`` satisfies its location's conjunction."""
    for p in hc.premises:
        dp = datapoints[p]
        if not satisfies(dp, conjunctions[dp.location]):
            return False
    return True


def conclusion_satisfied(hc: HornConstraint,
                         datapoints: Sequence[Datapoint],
                         conjunctions: Sequence[Set[int]]) -> bool:
    """True iff ``hc`` has a conclusion and it satisfies its conjunction."""
    if hc.conclusion is None:
        return False
    dp = datapoints[hc.conclusion]
    return satisfies(dp, conjunctions[dp.location])


def false_positions(dp: Datapoint, candidates: Iterable[int]) -> List[int]:
    """Candidates at which ``dp`` is false, in ascending order."""
    return [c for c in sorted(candidates) if not dp.values[c]]


def full_conjunctions(intervals: Sequence[Tuple[int, int]]) -> Conjunctions:
    """One conjunction ``{lo, ..., hi}`` per location interval."""
    if not intervals:
        raise InvalidArgumentError("Intervals are empty")

    conjunctions: Conjunctions = []
    for i, (lo, hi) in enumerate(intervals):
        if lo < 0 or lo > hi:
            raise InvalidArgumentError(f"Interval #{i} [{lo}, {hi}] is invalid")
        conjunctions.append(set(range(lo, hi + 1)))
    return conjunctions


def check_sizes(X: Sequence[Set[int]], R: Sequence[Set[int]]) -> None:
    """Shared argument check of the Sorcar variants."""
    if not X:
        raise InvalidArgumentError("X must not be empty")
    if len(X) != len(R):
        raise InvalidArgumentError(
            f"R and X must be of same size (got {len(R)} and {len(X)})"
        )


def prepare_sets(X: Sequence[Set[int]], R: Conjunctions) -> Conjunctions:
    """
    Split X against the retained set R.

    Updates ``R[i] := R[i] ∩ X[i]`` in place and returns ``X[i] \\ R[i]``
    per location: the candidates a Sorcar variant may add to R.
    """
    X_minus_R: Conjunctions = []
    for i in range(len(X)):
        R[i].intersection_update(X[i])
        X_minus_R.append(set(X[i]) - R[i])
    return X_minus_R


def total_size(conjunctions: Iterable[Set[int]]) -> int:
    """Number of predicates over all locations."""
    return sum(len(c) for c in conjunctions)


def format_conjunctions(conjunctions: Iterable[Set[int]]) -> str:
    return " | ".join(
        "[" + " ".join(str(p) for p in sorted(c)) + "]" for c in conjunctions
    )


# =============================================================================
# CONSISTENCY
# =============================================================================

def find_inconsistency(conjunctions: Sequence[Set[int]],
                       datapoints: Sequence[Datapoint],
                       horn_constraints: Sequence[HornConstraint]) -> Optional[str]:
    """
    Describe the first example the conjunctions get wrong, or None.

    Checks every classified datapoint against its label, then every Horn
    constraint whose premises are all satisfied.
    """
    for i, dp in enumerate(datapoints):
        if not dp.is_classified:
            continue
        predicted = satisfies(dp, conjunctions[dp.location])
        if predicted != dp.classification:
            return (f"datapoint #{i} {dp}: predicted {predicted}, "
                    f"labelled {dp.classification}")

    for j, hc in enumerate(horn_constraints):
        if premises_satisfied(hc, datapoints, conjunctions) and \
                not conclusion_satisfied(hc, datapoints, conjunctions):
            return f"horn constraint #{j} {hc} violated"

    return None


def is_consistent(conjunctions: Sequence[Set[int]],
                  datapoints: Sequence[Datapoint],
                  horn_constraints: Sequence[HornConstraint]) -> bool:
    """True iff the conjunctions agree with every example and constraint."""
    problem = find_inconsistency(conjunctions, datapoints, horn_constraints)
    if problem is not None:
        logger.debug("Not consistent: %s (conjunctions %s)",
                     problem, format_conjunctions(conjunctions))
        return False
    return True


def ensure_consistent(conjunctions: Sequence[Set[int]],
                      datapoints: Sequence[Datapoint],
                      horn_constraints: Sequence[HornConstraint],
                      algorithm: str) -> None:
    """Post-condition of every algorithm; raises InconsistentResultError."""
    problem = find_inconsistency(conjunctions, datapoints, horn_constraints)
    if problem is not None:
        logger.error("%s produced inconsistent conjunctions %s: %s",
                     algorithm, format_conjunctions(conjunctions), problem)
        raise InconsistentResultError(f"{algorithm}: {problem}")
