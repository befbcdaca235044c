"""
File interface to the verifier: round inputs in, JSON invariant out.
"""

from .readers import (
    AttributesMetadata,
    RoundInput,
    read_attributes_file,
    read_data_file,
    read_horn_file,
    read_intervals_file,
    read_status_file,
    read_round,
)
from .formula_json import conjunctions_to_tree, format_json_tree, write_json_file

__all__ = [
    'AttributesMetadata',
    'RoundInput',
    'read_attributes_file',
    'read_data_file',
    'read_horn_file',
    'read_intervals_file',
    'read_status_file',
    'read_round',
    'conjunctions_to_tree',
    'format_json_tree',
    'write_json_file',
]
