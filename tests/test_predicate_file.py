"""
Tests for the .R predicate-set file and atomic output replacement.
"""

import pytest

from sorcar.errors import OutputFileError, PredicateFileError
from sorcar.fileio import replace_files
from sorcar.learning.predicate_file import (
    format_predicate_sets,
    parse_predicate_sets,
    read_predicate_sets,
    write_predicate_sets,
)


def test_format_writes_one_line_per_location():
    assert format_predicate_sets([{5, 0, 2}, set(), {7}]) == "0 2 5\ne\n7\n"


def test_write_then_read(tmp_path):
    path = tmp_path / "round.R"
    sets = [{0, 2, 5}, set(), {7}]
    write_predicate_sets(path, sets)
    assert path.read_text() == "0 2 5\ne\n7\n"
    assert read_predicate_sets(path) == sets


def test_write_replaces_existing_file(tmp_path):
    path = tmp_path / "round.R"
    path.write_text("1 2 3\n1\n")
    write_predicate_sets(path, [set()])
    assert read_predicate_sets(path) == [set()]
    # no temporary files left behind
    assert [p.name for p in tmp_path.iterdir()] == ["round.R"]


def test_parse_skips_blank_lines():
    assert parse_predicate_sets("1 2\n\n  e  \n\n3\n") == [{1, 2}, set(), {3}]


@pytest.mark.parametrize("text", ["1 x\n", "-1\n", "1,2\n"])
def test_parse_rejects_bad_tokens(text):
    with pytest.raises(PredicateFileError):
        parse_predicate_sets(text)


def test_read_missing_file(tmp_path):
    with pytest.raises(PredicateFileError) as excinfo:
        read_predicate_sets(tmp_path / "missing.R")
    assert isinstance(excinfo.value, OSError)


def test_write_into_missing_directory(tmp_path):
    path = tmp_path / "nowhere" / "round.R"
    with pytest.raises(PredicateFileError):
        write_predicate_sets(path, [{1}])
    assert not path.exists()


def test_replace_files_writes_nothing_when_one_target_fails(tmp_path):
    first = tmp_path / "round.json"
    first.write_text("old")
    with pytest.raises(OutputFileError):
        replace_files([(first, "new"), (tmp_path / "nowhere" / "round.R", "e\n")])
    assert first.read_text() == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["round.json"]
