"""Catalog CSV parsing."""

import pytest

from catalog_backend.exceptions import InvalidRequestError
from catalog_backend.services.csv_service import parse_rows, parse_source_records

HEADER = "show_id,type,title,director,cast,country,date_added,release_year,rating,duration,listed_in,description"


class TestParseSourceRecords:
    """Header-driven parsing into SourceRecords."""

    def test_quoted_fields(self):
        text = HEADER + '\ns1,Movie,Dark,,"A, B",Germany,"September 1, 2021",2019,TV-MA,90 min,"Dramas, Thrillers","Time, travel."\n'
        records = parse_source_records(text)
        assert len(records) == 1
        record = records[0]
        assert record.show_id == "s1"
        assert record.cast == "A, B"
        assert record.date_added == "September 1, 2021"
        assert record.release_year == 2019
        assert record.listed_in == "Dramas, Thrillers"
        assert record.director == ""

    def test_missing_year_is_none(self):
        records = parse_source_records("show_id,title,release_year\ns1,Dark,\n")
        assert records[0].release_year is None

    def test_out_of_range_year_is_none(self):
        records = parse_source_records("show_id,title,release_year\ns1,A,1e400\ns2,B,inf\ns3,C,-inf\n")
        assert [r.release_year for r in records] == [None, None, None]

    def test_missing_columns_default_empty(self):
        records = parse_source_records("show_id,title\ns1,Dark\ns2,Ozark\n")
        assert [r.title for r in records] == ["Dark", "Ozark"]
        assert records[1].description == ""

    def test_unknown_columns_ignored(self):
        records = parse_source_records("show_id,title,popularity\ns1,Dark,99\n")
        assert records[0].title == "Dark"

    def test_byte_order_mark(self):
        records = parse_source_records("\ufeffshow_id,title\ns1,Dark\n")
        assert records[0].show_id == "s1"

    def test_blank_lines_skipped(self):
        records = parse_source_records("show_id,title\ns1,Dark\n,\ns2,Ozark\n")
        assert [r.show_id for r in records] == ["s1", "s2"]

    def test_empty_file(self):
        with pytest.raises(InvalidRequestError):
            parse_source_records("   \n")

    def test_header_without_key(self):
        with pytest.raises(InvalidRequestError, match="show_id"):
            parse_source_records("title,type\nDark,Movie\n")

    def test_extra_cells_rejected(self):
        with pytest.raises(InvalidRequestError, match="Row 3"):
            parse_source_records("show_id,title\ns1,Dark\ns2,Ozark,extra\n")

    def test_blank_key_rejected(self):
        with pytest.raises(InvalidRequestError, match="Row 2"):
            parse_source_records("show_id,title\n ,Dark\n")


class TestParseRows:
    """JSON rows from the action endpoint."""

    def test_numeric_keys_become_strings(self):
        records = parse_rows([{"show_id": 7, "title": "Dark", "release_year": "2019.0"}])
        assert records[0].show_id == "7"
        assert records[0].release_year == 2019

    def test_missing_key(self):
        with pytest.raises(InvalidRequestError):
            parse_rows([{"title": "Dark"}])
