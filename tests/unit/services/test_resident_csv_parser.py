"""
Unit tests for the resident import file parser
"""

import pytest

from services.resident_csv_parser import parse_resident_csv, split_line

HEADER = "full_name,phone_number,block_number,apartment_number,move_in_month,move_in_year"


class TestSplitLine:
    """Field splitting for a single data line"""

    def test_plain_commas(self):
        assert split_line("Alice,555,A,101,Jan,2024") == ['Alice', '555', 'A', '101', 'Jan', '2024']

    def test_comma_inside_quotes_does_not_split(self):
        fields = split_line('"Smith, John",555,A,101')

        assert fields == ['Smith, John', '555', 'A', '101']

    def test_fields_are_trimmed(self):
        assert split_line(" Alice , 555 ,A , 101") == ['Alice', '555', 'A', '101']

    def test_tab_separated_line(self):
        fields = split_line("Alice\t555\tA\t101\tMarch\t2023")

        assert fields == ['Alice', '555', 'A', '101', 'March', '2023']

    def test_tab_line_keeps_commas_and_strips_full_quotes(self):
        fields = split_line('"Smith, John"\t555\tA\t101')

        assert fields == ['Smith, John', '555', 'A', '101']

    def test_empty_trailing_fields_preserved(self):
        assert split_line("Alice,,A,101,,") == ['Alice', '', 'A', '101', '', '']


class TestParseResidentCsv:
    """Whole-file parsing"""

    def test_well_formed_file_has_one_row_per_data_line(self):
        text = "\n".join([
            HEADER,
            "Alice,555,A,101,Jan,2024",
            "Bob,556,A,102,Feb,2024",
            "Carol,557,B,5,Mar,2023",
        ])

        parsed = parse_resident_csv(text)

        assert parsed.errors == []
        assert len(parsed.rows) == 3
        assert parsed.rows[1][0] == 'Bob'

    def test_header_is_skipped(self):
        parsed = parse_resident_csv(HEADER + "\nAlice,555,A,101")

        assert parsed.rows == [['Alice', '555', 'A', '101']]

    def test_blank_lines_are_ignored(self):
        text = HEADER + "\n\nAlice,555,A,101\n   \n\nBob,556,A,102\n"

        parsed = parse_resident_csv(text)

        assert len(parsed.rows) == 2
        assert parsed.errors == []

    def test_windows_line_endings(self):
        parsed = parse_resident_csv(HEADER + "\r\nAlice,555,A,101\r\nBob,556,A,102\r\n")

        assert [row[0] for row in parsed.rows] == ['Alice', 'Bob']
        assert parsed.rows[1][3] == '102'

    def test_short_line_reported_and_parsing_continues(self):
        text = HEADER + "\nAlice,555\nBob,556,A,102"

        parsed = parse_resident_csv(text)

        assert parsed.errors == ["Invalid data format: Alice,555"]
        assert parsed.rows == [['Bob', '556', 'A', '102']]

    def test_header_only_file(self):
        parsed = parse_resident_csv(HEADER)

        assert parsed.rows == []
        assert parsed.errors == []

    @pytest.mark.parametrize("text", ["", "\n", HEADER + "\n\n"])
    def test_empty_inputs(self, text):
        parsed = parse_resident_csv(text)

        assert parsed.rows == []
        assert parsed.errors == []

    def test_tsv_file(self):
        text = "name\tphone\tblock\tapt\nAlice\t555\tA\t101\nBob\t\tA\t102"

        parsed = parse_resident_csv(text)

        assert parsed.rows == [['Alice', '555', 'A', '101'], ['Bob', '', 'A', '102']]
