"""
Sorcar: Horndini / Sorcar learning of conjunctive inductive invariants.

A learner for a counterexample-guided verification loop. Each round it
receives:
1. datapoints: program states, labelled positive, negative or unknown
2. Horn constraints: implications between datapoints
3. per-location predicate intervals

and proposes, per location, a conjunction of predicates consistent with all
of them. Horndini returns the largest such conjunction. The Sorcar variants
return a small one that only grows across rounds as counterexamples demand.
"""

__version__ = "0.1.0"
