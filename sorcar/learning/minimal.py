"""
Sorcar with a minimum-cardinality selection of relevant predicates.

Greedy hitting sets are only approximate. This variant phrases the choice of
predicates as a SAT problem and asks for the smallest model:

    variables   s_(l,p)  for every candidate p ∈ X_l \\ R_l   ("add p to R_l")

    negative d accepted by R         ⋁ { s_(l,p) : d falsifies p }
    violated  d_1 ∧ .. ∧ d_n → c      ⋁ { s_(l,p) : some d_i falsifies p }
    satisfied d_1 ∧ .. ∧ d_n → c      for each p that c falsifies:
                                        (⋁ premise candidates) ∨ ¬s_(l,p)

    Σ s ≤ k      for k = 1, 2, ... until the formula is satisfiable

The third clause family keeps a constraint that R currently satisfies from
being broken by the selection: either some premise gets rejected too, or no
predicate falsifying the conclusion is selected. Constraints whose premises R
already rejects need no clause, since adding predicates only rejects more.

The formula is handed to a CardinalitySolver, which only needs to answer
"give me a model with at most k true variables". Z3CardinalitySolver is the
default; any other SAT/PB backend can be injected.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Set

import z3

from ..errors import InfeasibleError, SolverExhaustedError
from .conjunction import (
    Conjunctions,
    conclusion_satisfied,
    ensure_consistent,
    false_positions,
    premises_satisfied,
    total_size,
)
from .datapoint import Datapoint, HornConstraint
from .reduce import Candidate, accepted_negatives, begin_reduction, commit

logger = logging.getLogger(__name__)

Clause = List[int]  # DIMACS-style literals over 1-based variables


# =============================================================================
# CARDINALITY SOLVERS
# =============================================================================

class CardinalitySolver(ABC):
    """
    Satisfiability oracle with an at-most-k bound.

    ``solve`` returns the set of variables assigned true in some model with
    at most ``bound`` true variables, or None when no such model exists.
    """

    @abstractmethod
    def solve(self, clauses: Sequence[Clause], variable_count: int,
              bound: int) -> Optional[Set[int]]:
        pass


class Z3CardinalitySolver(CardinalitySolver):
    """CardinalitySolver backed by z3 with a pseudo-boolean sum bound."""

    def __init__(self, timeout_ms: Optional[int] = None):
        self.timeout_ms = timeout_ms
        self.stats = {
            'checks': 0,
            'sat_results': 0,
            'unsat_results': 0,
        }

    def solve(self, clauses: Sequence[Clause], variable_count: int,
              bound: int) -> Optional[Set[int]]:
        self.stats['checks'] += 1

        select = [z3.Bool(f"s_{v}") for v in range(1, variable_count + 1)]

        def literal(lit: int) -> z3.BoolRef:
            var = select[abs(lit) - 1]
            return var if lit > 0 else z3.Not(var)

        solver = z3.Solver()
        if self.timeout_ms is not None:
            solver.set("timeout", int(self.timeout_ms))

        for clause in clauses:
            if clause:
                solver.add(z3.Or([literal(lit) for lit in clause]))
            else:
                solver.add(z3.BoolVal(False))

        if select:
            solver.add(z3.Sum([z3.If(s, 1, 0) for s in select]) <= bound)

        result = solver.check()
        if result == z3.unsat:
            self.stats['unsat_results'] += 1
            return None
        if result != z3.sat:
            raise SolverExhaustedError(
                f"z3 returned {result} at bound {bound}: {solver.reason_unknown()}"
            )

        self.stats['sat_results'] += 1
        model = solver.model()
        return {
            v for v in range(1, variable_count + 1)
            if z3.is_true(model.eval(select[v - 1], model_completion=True))
        }


# =============================================================================
# CLAUSE CONSTRUCTION
# =============================================================================

class SelectionFormula:
    """Clauses over one selection variable per candidate of X \\ R."""

    def __init__(self, X_minus_R: Sequence[Set[int]]):
        self.variables: Dict[Candidate, int] = {}
        self.candidates: List[Candidate] = []
        for location, candidates in enumerate(X_minus_R):
            for p in sorted(candidates):
                self.candidates.append((location, p))
                self.variables[(location, p)] = len(self.candidates)
        self.clauses: List[Clause] = []
        self.obligations = 0

    @property
    def variable_count(self) -> int:
        return len(self.candidates)

    def falsified(self, dp: Datapoint, X_minus_R: Sequence[Set[int]]) -> List[int]:
        return [self.variables[(dp.location, p)]
                for p in false_positions(dp, X_minus_R[dp.location])]

    def add_obligation(self, clause: Clause) -> None:
        self.clauses.append(clause)
        self.obligations += 1

    def add_guard(self, clause: Clause) -> None:
        self.clauses.append(clause)

    def decode(self, selected: Set[int]) -> List[Candidate]:
        return [self.candidates[v - 1] for v in sorted(selected)]


def build_selection_formula(datapoints: Sequence[Datapoint],
                            horn_constraints: Sequence[HornConstraint],
                            R: Sequence[Set[int]],
                            X_minus_R: Sequence[Set[int]]) -> SelectionFormula:
    """Encode every open obligation and every satisfied constraint as clauses."""
    formula = SelectionFormula(X_minus_R)

    for i in accepted_negatives(datapoints, R):
        dp = datapoints[i]
        clause = formula.falsified(dp, X_minus_R)
        if not clause:
            raise InfeasibleError(
                f"sorcar-minimal: negative datapoint #{i} {dp} satisfies X; "
                f"X is not a consistent superset"
            )
        formula.add_obligation(clause)

    for j, hc in enumerate(horn_constraints):
        if not premises_satisfied(hc, datapoints, R):
            continue

        premise_vars: Clause = []
        for p in hc.premises:
            for v in formula.falsified(datapoints[p], X_minus_R):
                if v not in premise_vars:
                    premise_vars.append(v)

        if not conclusion_satisfied(hc, datapoints, R):
            if not premise_vars:
                raise InfeasibleError(
                    f"sorcar-minimal: horn constraint #{j} ({hc}) is violated "
                    f"and no premise falsifies a candidate of X \\ R"
                )
            formula.add_obligation(premise_vars)
        else:
            conclusion = datapoints[hc.conclusion]
            for v in formula.falsified(conclusion, X_minus_R):
                formula.add_guard(premise_vars + [-v])

    return formula


# =============================================================================
# ENTRY POINT
# =============================================================================

def reduce_predicates_minimal(datapoints: Sequence[Datapoint],
                              horn_constraints: Sequence[HornConstraint],
                              X: Sequence[Set[int]],
                              R: Conjunctions,
                              solver: Optional[CardinalitySolver] = None,
                              check_consistency: bool = True) -> None:
    """
    Sorcar adding a minimum number of relevant predicates. Updates R in place.

    Raises SolverExhaustedError when no bound up to the number of candidates
    admits a model.
    """
    X_minus_R = begin_reduction(datapoints, horn_constraints, X, R)
    size_before = total_size(R)

    formula = build_selection_formula(datapoints, horn_constraints, R, X_minus_R)
    logger.debug("sorcar-minimal: %d variables, %d clauses (%d obligations)",
                 formula.variable_count, len(formula.clauses), formula.obligations)

    if formula.obligations == 0:
        logger.info("sorcar-minimal: R is already consistent")
    else:
        if solver is None:
            solver = Z3CardinalitySolver()

        selected = None
        k = 1
        while True:
            selected = solver.solve(formula.clauses, formula.variable_count, k)
            if selected is not None:
                break
            if k >= formula.variable_count:
                raise SolverExhaustedError(
                    f"sorcar-minimal: no selection of at most {k} of "
                    f"{formula.variable_count} candidates satisfies the constraints"
                )
            k += 1

        commit(R, X_minus_R, formula.decode(selected))
        logger.info("sorcar-minimal: added %d predicates (bound k=%d)",
                    total_size(R) - size_before, k)

    if check_consistency:
        ensure_consistent(R, datapoints, horn_constraints, "sorcar-minimal")
