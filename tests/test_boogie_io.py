"""
Tests for the verifier-facing files: round input readers and JSON output.
"""

import json

import pytest

from sorcar.boogie import (
    AttributesMetadata,
    conjunctions_to_tree,
    read_attributes_file,
    read_data_file,
    read_horn_file,
    read_intervals_file,
    read_round,
    read_status_file,
    write_json_file,
)
from sorcar.errors import InputFormatError


def _write_round(tmp_path, name="round", **overrides):
    files = {
        "attributes": "cat,$func,2\nint,x>0\nint,y>0\nint,z>0\nint,w>0\n",
        "data": "0,1,1,0,0,1\n0,0,1,0,0,0\n\n1,1,1,1,0,?\n",
        "horn": "0,2\n2,-1\n",
        "intervals": "0,1\n2,3\n",
        "status": "3\n",
    }
    files.update(overrides)
    for ext, content in files.items():
        (tmp_path / f"{name}.{ext}").write_text(content)
    return str(tmp_path / name)


def test_read_round(tmp_path):
    data = read_round(_write_round(tmp_path))

    assert data.metadata.int_names == ["x>0", "y>0", "z>0", "w>0"]
    assert data.metadata.location_attribute == "$func"
    assert data.metadata.categorical_sizes == [2]
    assert data.round == 3
    assert data.intervals == [(0, 1), (2, 3)]

    first, second, third = data.datapoints
    assert first.is_positive and first.location == 0
    assert first.values == (True, True, False, False)
    assert second.is_negative
    assert not third.is_classified and third.location == 1

    assert [hc.premises for hc in data.horn_constraints] == [(0,), (2,)]
    assert [hc.conclusion for hc in data.horn_constraints] == [2, None]


def test_attribute_count_includes_location():
    metadata = AttributesMetadata(int_names=["a", "b"], categorical_names=["$func"],
                                  categorical_sizes=[1])
    assert metadata.attribute_count() == 3
    assert AttributesMetadata().attribute_count() == 0


def test_unknown_attribute_kind(tmp_path):
    path = tmp_path / "a.attributes"
    path.write_text("int,x\nreal,y\n")
    with pytest.raises(InputFormatError, match=":2:"):
        read_attributes_file(path)


def test_data_with_wrong_width(tmp_path):
    path = tmp_path / "a.data"
    path.write_text("0,1,0,1\n")
    with pytest.raises(InputFormatError):
        read_data_file(path, AttributesMetadata(int_names=["x"]))


def test_data_with_unknown_label(tmp_path):
    path = tmp_path / "a.data"
    path.write_text("0,1,maybe\n")
    with pytest.raises(InputFormatError, match="classification"):
        read_data_file(path, AttributesMetadata(int_names=["x"]))


def test_data_accepts_word_labels(tmp_path):
    path = tmp_path / "a.data"
    path.write_text("0,1,true\n0,0,False\n")
    positive, negative = read_data_file(path, AttributesMetadata(int_names=["x"]))
    assert positive.is_positive
    assert negative.is_negative


def test_horn_index_out_of_range(tmp_path):
    data_path = tmp_path / "a.data"
    data_path.write_text("0,1,?\n")
    datapoints = read_data_file(data_path, AttributesMetadata(int_names=["x"]))

    horn_path = tmp_path / "a.horn"
    horn_path.write_text("0,1\n")
    with pytest.raises(InputFormatError, match="out of range"):
        read_horn_file(horn_path, datapoints)


@pytest.mark.parametrize("content", ["1\n", "2,1\n", "a,b\n"])
def test_bad_intervals(tmp_path, content):
    path = tmp_path / "a.intervals"
    path.write_text(content)
    with pytest.raises(InputFormatError):
        read_intervals_file(path)


@pytest.mark.parametrize("content", ["", "0\n", "two\n"])
def test_bad_status(tmp_path, content):
    path = tmp_path / "a.status"
    path.write_text(content)
    with pytest.raises(InputFormatError):
        read_status_file(path)


def test_interval_past_declared_predicates(tmp_path):
    stem = _write_round(tmp_path, intervals="0,1\n2,4\n")
    with pytest.raises(InputFormatError, match="exceeds"):
        read_round(stem)


def test_missing_file_names_path(tmp_path):
    stem = _write_round(tmp_path)
    (tmp_path / "round.horn").unlink()
    with pytest.raises(InputFormatError, match="round.horn"):
        read_round(stem)


def test_tree_chains_conjunction_predicates():
    metadata = AttributesMetadata(int_names=["p", "q", "r"], categorical_names=["$func"],
                                  categorical_sizes=[2])
    tree = conjunctions_to_tree(metadata, [{2, 0}, set()])

    assert tree["attribute"] == "$func"
    first, second = tree["children"]

    assert first["attribute"] == "p"
    assert first["children"][0] == {"attribute": "", "cut": 0,
                                    "classification": False, "children": None}
    follow = first["children"][1]
    assert follow["attribute"] == "r"
    assert follow["children"][1] == {"attribute": "", "cut": 0,
                                     "classification": True, "children": None}

    assert second == {"attribute": "", "cut": 0, "classification": True, "children": None}


def test_write_json_file(tmp_path):
    metadata = AttributesMetadata(int_names=["p"])
    path = tmp_path / "round.json"
    write_json_file(metadata, [{0}], path)
    tree = json.loads(path.read_text())
    assert tree["attribute"] == "$func"
    assert tree["children"][0]["attribute"] == "p"
