import pytest

from quizbank.errors import SchemaError
from quizbank.schema import build_header_map, cell, require_columns


def test_header_map_trims_names_and_keeps_positions():
    header_map = build_header_map([" ID ", "Category", "", None, "Topic"])
    assert header_map == {"ID": 0, "Category": 1, "Topic": 4}


def test_duplicate_header_keeps_first_column():
    assert build_header_map(["ID", "ID"]) == {"ID": 0}


def test_require_columns_names_first_missing():
    header_map = build_header_map(["ID", "Question"])
    with pytest.raises(SchemaError) as excinfo:
        require_columns(header_map, ["ID", "Category", "Subject"])
    assert excinfo.value.column == "Category"
    assert "Category" in str(excinfo.value)


def test_require_columns_is_case_sensitive():
    header_map = build_header_map(["id"])
    with pytest.raises(SchemaError):
        require_columns(header_map, ["ID"])


@pytest.mark.parametrize(
    "headers,required,fails",
    [
        (["A", "B", "C"], ["A", "C"], False),
        (["A ", " B"], ["A", "B"], False),
        (["A", "B"], ["A", "B", "C"], True),
        ([], ["A"], True),
        (["A"], [], False),
    ],
)
def test_require_columns_fails_iff_some_name_absent(headers, required, fails):
    header_map = build_header_map(headers)
    if fails:
        with pytest.raises(SchemaError):
            require_columns(header_map, required)
    else:
        require_columns(header_map, required)


def test_cell_reads_trimmed_text_and_tolerates_short_rows():
    header_map = {"ID": 0, "Topic": 3}
    assert cell([" q1 ", "x"], header_map, "ID") == "q1"
    assert cell(["q1"], header_map, "Topic") == ""
    assert cell([7], header_map, "ID") == "7"
    assert cell([None], header_map, "ID") == ""
    assert cell(["q1"], header_map, "Missing") == ""
