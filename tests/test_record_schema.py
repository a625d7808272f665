"""Tests for positional record layouts and version detection."""

import pytest

from scouting.constants import COMPARISON_HEADERS, CSV_HEADERS, LEGACY_CSV_HEADERS
from scouting.errors import SchemaMismatchError
from scouting.record_schema import (
    SchemaVersion,
    append_comparison,
    detect_version,
    field_index,
    headers_for,
    read_field,
    require_version,
    write_field,
)

V1_ROW = ["254", "3", "254-R3", "R1", "R", "Ann", "note", "4", "6"]
V2_ROW = ["254", "3", "254-R3", "R1", "R", "Ann", "quick", "2", "1", "9", "0", "none"]


class TestDetectVersion:
    @pytest.mark.parametrize(
        "count, expected",
        [
            (7, SchemaVersion.CREATED),
            (9, SchemaVersion.V1),
            (10, SchemaVersion.V1),
            (11, SchemaVersion.V2),
            (12, SchemaVersion.V2),
            (15, SchemaVersion.V2_COMPARED),
            (16, SchemaVersion.V2_COMPARED),
        ],
    )
    def test_known_counts(self, count, expected):
        assert detect_version(count) == expected

    @pytest.mark.parametrize("count", [0, 6, 8, 13, 14])
    def test_unknown_counts(self, count):
        assert detect_version(count) is None

    def test_require_version_raises(self):
        with pytest.raises(SchemaMismatchError) as exc_info:
            require_version(["x"] * 13)
        assert exc_info.value.field_count == 13


class TestReadField:
    def test_v1_layout(self):
        assert read_field(V1_ROW, "auto_fuel", SchemaVersion.V1) == 4
        assert read_field(V1_ROW, "teleop_fuel", SchemaVersion.V1) == 6
        assert read_field(V1_ROW, "auto_passes", SchemaVersion.V1) == 0
        assert read_field(V1_ROW, "teleop_passes", SchemaVersion.V1) == 0
        assert read_field(V1_ROW, "questions", SchemaVersion.V1) == ""
        assert read_field(V1_ROW, "comment", SchemaVersion.V1) == ""

    def test_v1_questions_at_nine(self):
        row = V1_ROW + ["why?"]
        assert read_field(row, "questions", SchemaVersion.V1) == "why?"

    def test_v2_layout(self):
        assert read_field(V2_ROW, "comment", SchemaVersion.V2) == "quick"
        assert read_field(V2_ROW, "auto_passes", SchemaVersion.V2) == 1
        assert read_field(V2_ROW, "teleop_fuel", SchemaVersion.V2) == 9
        assert read_field(V2_ROW, "questions", SchemaVersion.V2) == "none"

    def test_created_row_defaults(self):
        row = V2_ROW[:7]
        assert read_field(row, "auto_fuel", SchemaVersion.CREATED) == 0
        assert read_field(row, "questions", SchemaVersion.CREATED) == ""

    def test_non_numeric_counter_reads_default(self):
        row = list(V2_ROW)
        row[7] = "lots"
        assert read_field(row, "auto_fuel", SchemaVersion.V2) == 0

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            field_index("climb_level", SchemaVersion.V2)


class TestWriteField:
    def test_length_is_preserved(self):
        updated = write_field(V2_ROW, "teleop_passes", 3, SchemaVersion.V2)
        assert len(updated) == len(V2_ROW)
        assert updated[10] == "3"
        assert V2_ROW[10] == "0"

    def test_missing_field_raises(self):
        with pytest.raises(KeyError):
            write_field(V1_ROW, "comment", "x", SchemaVersion.V1)
        with pytest.raises(KeyError):
            write_field(V2_ROW[:7], "questions", "x", SchemaVersion.CREATED)


class TestAppendComparison:
    def test_prefix_is_unchanged(self):
        extended = append_comparison(V2_ROW, 254, 118, 1)
        assert len(extended) == 15
        assert extended[:12] == V2_ROW
        assert extended[12:] == ["254", "118", "1"]

    def test_requires_twelve_fields(self):
        with pytest.raises(ValueError):
            append_comparison(V2_ROW[:11], 254, 118, 1)


class TestHeaders:
    def test_compared_headers(self):
        assert headers_for(SchemaVersion.V2_COMPARED, 15) == CSV_HEADERS + COMPARISON_HEADERS

    def test_legacy_headers(self):
        assert headers_for(SchemaVersion.V1, 9) == LEGACY_CSV_HEADERS[:9]

    def test_created_headers(self):
        assert headers_for(SchemaVersion.CREATED, 7) == CSV_HEADERS[:7]
