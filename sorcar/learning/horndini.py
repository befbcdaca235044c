"""
Horndini: Houdini over datapoints and Horn constraints.

Computes, per location, the largest conjunction of predicates that is
consistent with every positive datapoint and every Horn constraint:

    1. Start from all predicates of each location (X_i = {lo_i..hi_i}).
    2. Every positive datapoint knocks out the predicates it falsifies.
    3. A Horn constraint whose premises all satisfy X now forces its
       conclusion to be positive: it joins the work-list and the constraint
       is retired. A constraint without conclusion whose premises all satisfy
       X cannot be repaired by removing predicates: the corpus is infeasible.
    4. Repeat until the work-list stays empty.

Conjunctions only shrink, and a premise that satisfies a conjunction keeps
satisfying every smaller one, so each working premise list only shrinks too.
That makes the fixed point finite. The result X is the unique maximal
solution; any consistent conjunction vector is contained in it, which is
why the Sorcar variants pick their candidates from X.

Negative datapoints play no role in the elimination. If one of them still
satisfies the maximal X, no smaller conjunction can exclude it either, and
the corpus is reported infeasible.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Set, Tuple

from ..errors import InfeasibleError, InvalidArgumentError
from .conjunction import (
    Conjunctions,
    ensure_consistent,
    format_conjunctions,
    full_conjunctions,
    satisfies,
)
from .datapoint import Datapoint, HornConstraint, classified_split, validate_corpus

logger = logging.getLogger(__name__)


def horndini(datapoints: Sequence[Datapoint],
             horn_constraints: Sequence[HornConstraint],
             intervals: Sequence[Tuple[int, int]],
             check_consistency: bool = True) -> Conjunctions:
    """
    Run Horndini from the full per-location predicate sets.

    Returns the maximal consistent conjunction vector X.
    """
    conjunctions = full_conjunctions(intervals)
    horndini_refine(datapoints, horn_constraints, conjunctions,
                    check_consistency=check_consistency)
    return conjunctions


def horndini_refine(datapoints: Sequence[Datapoint],
                    horn_constraints: Sequence[HornConstraint],
                    conjunctions: Conjunctions,
                    check_consistency: bool = True) -> None:
    """
    Shrink ``conjunctions`` in place to the Horndini fixed point.

    Raises InvalidArgumentError on malformed input (before touching
    ``conjunctions``) and InfeasibleError when no consistent conjunction
    exists.
    """
    if not conjunctions:
        raise InvalidArgumentError("Conjunctions are empty")
    validate_corpus(datapoints, horn_constraints, conjunctions)

    positive, negative = classified_split(datapoints)
    worklist: List[int] = list(positive)

    # Transient premise lists; the corpus constraints stay untouched
    pending: List[Tuple[int, List[int]]] = [
        (j, list(hc.premises)) for j, hc in enumerate(horn_constraints)
    ]

    stats = {
        'passes': 0,
        'predicates_removed': 0,
        'constraints_enforced': 0,
    }

    while True:
        stats['passes'] += 1

        # Knock out predicates that are false in a positive datapoint
        for i in worklist:
            dp = datapoints[i]
            conjunction = conjunctions[dp.location]
            falsified: Set[int] = {c for c in conjunction if not dp.values[c]}
            if falsified:
                conjunction.difference_update(falsified)
                stats['predicates_removed'] += len(falsified)
                logger.debug("Positive #%d removes %s from location %d",
                             i, sorted(falsified), dp.location)

        worklist = []

        # Discharge satisfied premises; enforce constraints left without any
        still_pending: List[Tuple[int, List[int]]] = []
        for j, premises in pending:
            remaining = [
                p for p in premises
                if not satisfies(datapoints[p], conjunctions[datapoints[p].location])
            ]
            if remaining:
                still_pending.append((j, remaining))
                continue

            hc = horn_constraints[j]
            if hc.conclusion is None:
                logger.info("Horn constraint #%d (%s) has all premises satisfied "
                            "and no conclusion", j, hc)
                raise InfeasibleError(
                    f"No consistent conjunction exists: horn constraint #{j} "
                    f"({hc}) cannot be violated"
                )
            worklist.append(hc.conclusion)
            stats['constraints_enforced'] += 1

        pending = still_pending

        if not worklist:
            break

    for i in negative:
        dp = datapoints[i]
        if satisfies(dp, conjunctions[dp.location]):
            raise InfeasibleError(
                f"No consistent conjunction exists: negative datapoint #{i} "
                f"{dp} satisfies every remaining predicate"
            )

    logger.info("Horndini reached fixed point after %d passes: removed %d "
                "predicates, enforced %d constraints",
                stats['passes'], stats['predicates_removed'],
                stats['constraints_enforced'])
    logger.debug("X = %s", format_conjunctions(conjunctions))

    if check_consistency:
        ensure_consistent(conjunctions, datapoints, horn_constraints, "horndini")
