"""
Sorcar with a greedy hitting-set selection of relevant predicates.

Every outstanding obligation (a negative datapoint R accepts, or a Horn
constraint R violates) can be fixed by any predicate of X \\ R that one of
its datapoints falsifies. Choosing few predicates that fix everything is a
hitting-set problem; the classic greedy approximation picks the predicate
covering the most open obligations, retires what it covers, and repeats:

    coverage[(location, p)] = (negatives fixed by p, constraints fixed by p)

    loop:
        add the violated Horn constraints to coverage
        while some candidate covers an open obligation:
            commit the candidate with the largest coverage (ties: lowest
            location, then lowest index)
            remove its obligations from every other candidate's coverage
        move the committed candidates into R
        stop once a pass finds nothing to fix

Committing predicates can break the conclusion of a constraint that was
fine before, which is why the outer loop rescans every constraint. Each
pass that finds a violation commits at least one predicate, so the loop
ends after at most |X \\ R| passes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..errors import InfeasibleError
from .conjunction import (
    Conjunctions,
    conclusion_satisfied,
    ensure_consistent,
    false_positions,
    premises_satisfied,
    total_size,
)
from .datapoint import Datapoint, HornConstraint
from .reduce import (
    Candidate,
    accepted_negatives,
    begin_reduction,
    commit,
    premise_candidates,
)

logger = logging.getLogger(__name__)

Coverage = Dict[Candidate, Tuple[Set[int], Set[int]]]


def _entry(coverage: Coverage, candidate: Candidate) -> Tuple[Set[int], Set[int]]:
    if candidate not in coverage:
        coverage[candidate] = (set(), set())
    return coverage[candidate]


def _best_candidate(coverage: Coverage, order: Sequence[Candidate]) -> Optional[Candidate]:
    """Candidate covering the most open obligations; ``order`` breaks ties."""
    best = None
    best_value = 0
    for candidate in order:
        entry = coverage.get(candidate)
        if entry is None:
            continue
        value = len(entry[0]) + len(entry[1])
        if value > best_value:
            best = candidate
            best_value = value
    return best


def reduce_predicates_greedy(datapoints: Sequence[Datapoint],
                             horn_constraints: Sequence[HornConstraint],
                             X: Sequence[Set[int]],
                             R: Conjunctions,
                             check_consistency: bool = True) -> None:
    """Sorcar using a greedy hitting set. Updates R in place."""
    X_minus_R = begin_reduction(datapoints, horn_constraints, X, R)
    size_before = total_size(R)

    coverage: Coverage = {}

    for i in accepted_negatives(datapoints, R):
        dp = datapoints[i]
        positions = false_positions(dp, X_minus_R[dp.location])
        if not positions:
            raise InfeasibleError(
                f"sorcar-greedy: negative datapoint #{i} {dp} satisfies X; "
                f"X is not a consistent superset"
            )
        for p in positions:
            _entry(coverage, (dp.location, p))[0].add(i)

    passes = 0
    while True:
        passes += 1
        done = True

        for j, hc in enumerate(horn_constraints):
            if premises_satisfied(hc, datapoints, R) and \
                    not conclusion_satisfied(hc, datapoints, R):
                done = False
                candidates = premise_candidates(hc, datapoints, X_minus_R)
                if not candidates:
                    raise InfeasibleError(
                        f"sorcar-greedy: horn constraint #{j} ({hc}) is violated "
                        f"and no premise falsifies a candidate of X \\ R"
                    )
                for candidate in candidates:
                    _entry(coverage, candidate)[1].add(j)

        # Coverage only gains keys before selection starts
        order = sorted(coverage)
        chosen: List[Candidate] = []
        while True:
            best = _best_candidate(coverage, order)
            if best is None:
                break

            negatives, constraints = coverage.pop(best)

            # Covered obligations no longer count for any other candidate
            for i in negatives:
                dp = datapoints[i]
                for p in false_positions(dp, X_minus_R[dp.location]):
                    entry = coverage.get((dp.location, p))
                    if entry is not None:
                        entry[0].discard(i)
            for j in constraints:
                for candidate in premise_candidates(horn_constraints[j], datapoints, X_minus_R):
                    entry = coverage.get(candidate)
                    if entry is not None:
                        entry[1].discard(j)

            chosen.append(best)
            logger.debug("sorcar-greedy: %s covers %d negatives, %d constraints",
                         best, len(negatives), len(constraints))
            done = False

        # Every obligation is covered now; what is left has zero coverage
        coverage.clear()
        commit(R, X_minus_R, chosen)

        if done:
            break

    logger.info("sorcar-greedy: added %d predicates (%d passes)",
                total_size(R) - size_before, passes)

    if check_consistency:
        ensure_consistent(R, datapoints, horn_constraints, "sorcar-greedy")
