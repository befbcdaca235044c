"""
JSON emission of learned conjunctions as a decision tree.

The verifier reads the invariant as a tree of nodes

    {"attribute": <name>, "cut": 0, "classification": <bool>, "children": [...]}

whose root splits on the location attribute with one child per location.
A location's conjunction p ∧ q becomes a chain of tests; the left child of
a test is taken when the predicate is false:

    $func ─┬─ p ─┬─ false
           │     └─ q ─┬─ false
           │           └─ true
           └─ true                  (empty conjunction at location 1)

Leaves have an empty attribute and ``"children": null``.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Sequence, Set, Union

from ..fileio import replace_files
from .readers import AttributesMetadata


Node = Dict[str, Any]


def leaf(classification: bool) -> Node:
    return {"attribute": "", "cut": 0, "classification": classification, "children": None}


def conjunction_to_tree(metadata: AttributesMetadata, conjunction: Set[int]) -> Node:
    """Chain of predicate tests ending in a ``true`` leaf."""
    node = leaf(True)
    for p in sorted(conjunction, reverse=True):
        node = {
            "attribute": metadata.int_names[p],
            "cut": 0,
            "classification": True,
            "children": [leaf(False), node],
        }
    return node


def conjunctions_to_tree(metadata: AttributesMetadata,
                         conjunctions: Sequence[Set[int]]) -> Node:
    return {
        "attribute": metadata.location_attribute,
        "cut": 0,
        "classification": True,
        "children": [conjunction_to_tree(metadata, c) for c in conjunctions],
    }


def format_json_tree(metadata: AttributesMetadata,
                     conjunctions: Sequence[Set[int]]) -> str:
    return json.dumps(conjunctions_to_tree(metadata, conjunctions))


def write_json_file(metadata: AttributesMetadata,
                    conjunctions: Sequence[Set[int]],
                    path: Union[str, os.PathLike]) -> None:
    """Replace ``path`` atomically; raises OutputFileError."""
    replace_files([(path, format_json_tree(metadata, conjunctions))])
