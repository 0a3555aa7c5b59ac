"""Text normalization and the record/query text builders."""

import re

from catalog_backend.models.request_models import QueryCriteria
from catalog_backend.models.title_models import SourceRecord
from catalog_backend.services.text_normalizer import build_query_text, build_record_text, normalize_text

ALLOWED = re.compile(r"[a-z0-9\sà-öø-ÿßā-ž]*")


class TestNormalizeText:
    """Lowercasing and deletion of disallowed characters."""

    def test_lowercases_and_strips_punctuation(self):
        assert normalize_text("Hello, World!") == "hello world"

    def test_deletes_rather_than_replaces(self):
        """Removed characters leave no placeholder; surrounding spaces stay."""
        assert normalize_text("Ação & Comédia (2021)") == "ação  comédia 2021"

    def test_drops_non_latin_scripts(self):
        assert normalize_text("日本 movie 🎬") == " movie "

    def test_empty_and_none(self):
        assert normalize_text("") == ""
        assert normalize_text(None) == ""

    def test_output_in_allowed_set(self):
        samples = ["Sci-Fi & Fantasy", "TV-MA", "Œuvre Straße", "C'est la vie!", "R&B / Soul 100%"]
        for sample in samples:
            assert ALLOWED.fullmatch(normalize_text(sample))

    def test_idempotent(self):
        samples = ["Sci-Fi & Fantasy", "Ação", "  Mixed\tWhitespace \n", "ÀÉÎÕÜ", "Déjà Vu 2"]
        for sample in samples:
            once = normalize_text(sample)
            assert normalize_text(once) == once


class TestRecordText:
    """Fixed-order concatenation of a record's descriptive fields."""

    def test_field_order(self):
        record = SourceRecord(show_id="s1", type="Movie", title="Dark", director="Kim",
                              cast="A, B", country="Korea", release_year=2020, rating="R",
                              duration="90 min", listed_in="Thrillers", description="Tense.")
        assert build_record_text(record) == "Movie Dark Kim A, B Korea 2020 R 90 min Thrillers Tense."

    def test_missing_fields_are_empty(self):
        record = SourceRecord(show_id="s1", title="Dark", type="TV Show")
        assert build_record_text(record).split() == ["TV", "Show", "Dark"]

    def test_accepts_plain_rows(self):
        assert build_record_text({"title": "Dark", "release_year": None}).split() == ["Dark"]

    def test_show_id_not_included(self):
        record = SourceRecord(show_id="s999", title="Dark")
        assert "s999" not in build_record_text(record)


class TestQueryText:
    """Criteria concatenation for the query path."""

    def test_order_and_skipping(self):
        criteria = {"type": "Movie", "genre": "Sci-Fi", "tone": "", "country": "Japan"}
        assert build_query_text(criteria) == "Movie Sci-Fi Japan"

    def test_mapping_order_irrelevant(self):
        assert build_query_text({"country": "Japan", "type": "Movie"}) == "Movie Japan"

    def test_free_text_last(self):
        criteria = QueryCriteria(query="space pirates", genre="Action", duration="Short")
        assert build_query_text(criteria) == "Action Short space pirates"

    def test_nothing_selected(self):
        assert build_query_text(QueryCriteria()) == ""
