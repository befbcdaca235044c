"""
Learning: conjunctive invariant inference from ICE data and Horn constraints.

    ┌─────────────────────────────────────────────────────────────┐
    │  datapoints + Horn constraints + location intervals          │
    └──────────────────────────────┬──────────────────────────────┘
                                   ▼
    ┌─────────────────────────────────────────────────────────────┐
    │  HORNDINI  (horndini.py)                                     │
    │  maximal consistent conjunction X per location               │
    └──────────────────────────────┬──────────────────────────────┘
                                   ▼
    ┌─────────────────────────────────────────────────────────────┐
    │  SORCAR  (reduce.py, greedy.py, minimal.py)                  │
    │  R_new ⊆ X, grown from R_prev ∩ X only where needed          │
    │  all │ first │ greedy hitting set │ minimal (SAT, z3)        │
    └──────────────────────────────┬──────────────────────────────┘
                                   ▼
    ┌─────────────────────────────────────────────────────────────┐
    │  is_consistent (conjunction.py)  →  .R file (predicate_file) │
    └─────────────────────────────────────────────────────────────┘

Usage:
    from sorcar.learning import Datapoint, HornConstraint, horndini
    from sorcar.learning import reduce_predicates_greedy

    X = horndini(datapoints, constraints, intervals)
    R = [set() for _ in X]
    reduce_predicates_greedy(datapoints, constraints, X, R)
"""

from __future__ import annotations

from .datapoint import (
    Datapoint,
    HornConstraint,
    validate_corpus,
)

from .conjunction import (
    satisfies,
    full_conjunctions,
    prepare_sets,
    total_size,
    find_inconsistency,
    is_consistent,
    ensure_consistent,
)

from .horndini import (
    horndini,
    horndini_refine,
)

from .reduce import (
    reduce_predicates_all,
    reduce_predicates_first,
)

from .greedy import reduce_predicates_greedy

from .minimal import (
    CardinalitySolver,
    Z3CardinalitySolver,
    build_selection_formula,
    reduce_predicates_minimal,
)

from .predicate_file import (
    read_predicate_sets,
    write_predicate_sets,
)


__all__ = [
    # Data model
    'Datapoint',
    'HornConstraint',
    'validate_corpus',
    # Conjunction algebra
    'satisfies',
    'full_conjunctions',
    'prepare_sets',
    'total_size',
    'find_inconsistency',
    'is_consistent',
    'ensure_consistent',
    # Horndini
    'horndini',
    'horndini_refine',
    # Sorcar
    'reduce_predicates_all',
    'reduce_predicates_first',
    'reduce_predicates_greedy',
    'reduce_predicates_minimal',
    'CardinalitySolver',
    'Z3CardinalitySolver',
    'build_selection_formula',
    # Persistence
    'read_predicate_sets',
    'write_predicate_sets',
]
