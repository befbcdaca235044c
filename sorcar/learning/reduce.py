"""
Sorcar: shrink a retained conjunction R against Horndini's superset X.

Horndini's X is the *largest* consistent conjunction per location. Sorcar
instead keeps a small set R of "relevant" predicates between rounds and only
adds predicates from X \\ R when a counterexample demands it:

    R := R ∩ X
    for each negative datapoint still accepted by R:
        add predicate(s) from X \\ R that the datapoint falsifies
    repeat until a full pass adds nothing:
        for each pending Horn constraint:
            premises not all accepted by R  -> drop it for good
            premises and conclusion accepted -> keep pending (a later repair
                                                can break the conclusion)
            premises accepted, conclusion not -> add predicate(s) from X \\ R
                                                 that a premise falsifies, drop it

Adding predicates only ever rejects more datapoints, so a dropped constraint
can never become violated again, while a pending one can. Positive datapoints
stay accepted because R ⊆ X.

The variants differ only in *which* falsified predicates they add:

    ┌──────────┬──────────────────────────────┬──────────────────────────────┐
    │ Variant  │ negative datapoint           │ violated Horn constraint     │
    ├──────────┼──────────────────────────────┼──────────────────────────────┤
    │ all      │ every falsified candidate    │ every falsified candidate of │
    │          │                              │ every premise                │
    │ first    │ lowest falsified candidate   │ lowest falsified candidate   │
    │          │                              │ of the first premise with one│
    │ greedy   │ greedy hitting set (greedy.py)                              │
    │ minimal  │ minimum hitting set via SAT (minimal.py)                    │
    └──────────┴─────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Set, Tuple

from ..errors import InfeasibleError
from .conjunction import (
    Conjunctions,
    check_sizes,
    conclusion_satisfied,
    ensure_consistent,
    false_positions,
    prepare_sets,
    premises_satisfied,
    satisfies,
    total_size,
)
from .datapoint import Datapoint, HornConstraint, classified_split, validate_corpus

logger = logging.getLogger(__name__)

Candidate = Tuple[int, int]  # (location, attribute index)

NegativePolicy = Callable[[Datapoint, Conjunctions], List[Candidate]]
HornPolicy = Callable[[HornConstraint, Sequence[Datapoint], Conjunctions], List[Candidate]]


# =============================================================================
# SHARED SKELETON
# =============================================================================

def begin_reduction(datapoints: Sequence[Datapoint],
                    horn_constraints: Sequence[HornConstraint],
                    X: Sequence[Set[int]],
                    R: Conjunctions) -> Conjunctions:
    """
    Argument checks and step 0 shared by all variants.

    Rejects bad arguments before mutating R, then intersects R with X in
    place and returns X \\ R.
    """
    check_sizes(X, R)
    validate_corpus(datapoints, horn_constraints, X)
    return prepare_sets(X, R)


def accepted_negatives(datapoints: Sequence[Datapoint],
                       R: Sequence[Set[int]]) -> List[int]:
    """Indices of negative datapoints that R wrongly accepts."""
    _, negative = classified_split(datapoints)
    return [i for i in negative
            if satisfies(datapoints[i], R[datapoints[i].location])]


def premise_candidates(hc: HornConstraint,
                       datapoints: Sequence[Datapoint],
                       X_minus_R: Sequence[Set[int]]) -> List[Candidate]:
    """Candidates falsified by some premise, premise order then index order."""
    seen: Set[Candidate] = set()
    result: List[Candidate] = []
    for p in hc.premises:
        dp = datapoints[p]
        for c in false_positions(dp, X_minus_R[dp.location]):
            if (dp.location, c) not in seen:
                seen.add((dp.location, c))
                result.append((dp.location, c))
    return result


def commit(R: Conjunctions, X_minus_R: Conjunctions,
           candidates: Sequence[Candidate]) -> None:
    """Move candidates from X \\ R into R."""
    for location, c in candidates:
        R[location].add(c)
        X_minus_R[location].discard(c)


def _reduce(datapoints: Sequence[Datapoint],
            horn_constraints: Sequence[HornConstraint],
            X: Sequence[Set[int]],
            R: Conjunctions,
            negative_policy: NegativePolicy,
            horn_policy: HornPolicy,
            name: str,
            check_consistency: bool) -> None:
    X_minus_R = begin_reduction(datapoints, horn_constraints, X, R)
    size_before = total_size(R)

    # Negative datapoints
    for i in accepted_negatives(datapoints, R):
        dp = datapoints[i]
        # An earlier repair at the same location may already reject it
        if not satisfies(dp, R[dp.location]):
            continue
        chosen = negative_policy(dp, X_minus_R)
        if not chosen:
            raise InfeasibleError(
                f"{name}: negative datapoint #{i} {dp} satisfies X; "
                f"X is not a consistent superset"
            )
        commit(R, X_minus_R, chosen)
        logger.debug("%s: negative #%d adds %s", name, i, chosen)

    # Horn constraints, fixed point
    pending = list(range(len(horn_constraints)))
    passes = 0
    while True:
        passes += 1
        added = False
        still_pending: List[int] = []

        for j in pending:
            hc = horn_constraints[j]

            if not premises_satisfied(hc, datapoints, R):
                continue

            if conclusion_satisfied(hc, datapoints, R):
                still_pending.append(j)
                continue

            chosen = horn_policy(hc, datapoints, X_minus_R)
            if not chosen:
                raise InfeasibleError(
                    f"{name}: horn constraint #{j} ({hc}) is violated and no "
                    f"premise falsifies a candidate of X \\ R"
                )
            commit(R, X_minus_R, chosen)
            added = True
            logger.debug("%s: horn constraint #%d adds %s", name, j, chosen)

        pending = still_pending
        if not added:
            break

    logger.info("%s: added %d predicates (%d Horn passes)",
                name, total_size(R) - size_before, passes)

    if check_consistency:
        ensure_consistent(R, datapoints, horn_constraints, name)


# =============================================================================
# POLICIES
# =============================================================================

def _negative_all(dp: Datapoint, X_minus_R: Conjunctions) -> List[Candidate]:
    return [(dp.location, c) for c in false_positions(dp, X_minus_R[dp.location])]


def _negative_first(dp: Datapoint, X_minus_R: Conjunctions) -> List[Candidate]:
    return _negative_all(dp, X_minus_R)[:1]


def _horn_all(hc: HornConstraint, datapoints: Sequence[Datapoint],
              X_minus_R: Conjunctions) -> List[Candidate]:
    return premise_candidates(hc, datapoints, X_minus_R)


def _horn_first(hc: HornConstraint, datapoints: Sequence[Datapoint],
                X_minus_R: Conjunctions) -> List[Candidate]:
    for p in hc.premises:
        dp = datapoints[p]
        positions = false_positions(dp, X_minus_R[dp.location])
        if positions:
            return [(dp.location, positions[0])]
    return []


# =============================================================================
# ENTRY POINTS
# =============================================================================

def reduce_predicates_all(datapoints: Sequence[Datapoint],
                          horn_constraints: Sequence[HornConstraint],
                          X: Sequence[Set[int]],
                          R: Conjunctions,
                          check_consistency: bool = True) -> None:
    """Sorcar adding every relevant predicate. Updates R in place."""
    _reduce(datapoints, horn_constraints, X, R,
            _negative_all, _horn_all, "sorcar", check_consistency)


def reduce_predicates_first(datapoints: Sequence[Datapoint],
                            horn_constraints: Sequence[HornConstraint],
                            X: Sequence[Set[int]],
                            R: Conjunctions,
                            check_consistency: bool = True) -> None:
    """Sorcar adding only the first relevant predicate. Updates R in place."""
    _reduce(datapoints, horn_constraints, X, R,
            _negative_first, _horn_first, "sorcar-first", check_consistency)
