"""
Exception hierarchy for the sorcar learner.

Every failure that aborts a learning round derives from ``SorcarError`` so
the CLI can map it to an exit code. The concrete classes also inherit from
the closest builtin so callers that only know ``ValueError`` or
``RuntimeError`` keep working.
"""

from __future__ import annotations


class SorcarError(Exception):
    """Base class for all sorcar failures."""


class InvalidArgumentError(SorcarError, ValueError):
    """Malformed call: empty intervals, mismatched X/R, dangling indices."""


class InfeasibleError(SorcarError, RuntimeError):
    """No conjunction over the given predicates is consistent with the examples."""


class SolverExhaustedError(SorcarError, RuntimeError):
    """The cardinality search found no model (or the solver gave up)."""


class InconsistentResultError(SorcarError, AssertionError):
    """An algorithm returned conjunctions that violate the corpus."""


class PredicateFileError(SorcarError, OSError):
    """Reading or writing a persisted predicate-set file failed."""


class InputFormatError(SorcarError, ValueError):
    """A round input file (.attributes, .data, .horn, ...) is malformed."""


class OutputFileError(SorcarError, OSError):
    """Writing a round's output files (.json, .R) failed."""
