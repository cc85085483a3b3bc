"""
Tests for core.numbering — sequential identifier generation.
"""

import pytest

from core.numbering import IdentifierPolicy, max_sequence, next_id, next_sub_id, sequence_key
from core.store.protocol import Snapshot


class TestNextId:
    def test_empty_collection_starts_at_one(self):
        assert next_id([], "AW") == "AW1"

    def test_max_suffix_plus_one(self):
        assert next_id([{"idNo": "AW1"}, {"idNo": "AW3"}], "AW") == "AW4"

    def test_no_match_falls_back_to_count(self):
        assert next_id([{"idNo": "X1"}, {"idNo": "X2"}], "AW") == "AW3"

    def test_match_is_case_insensitive(self):
        assert next_id([{"idNo": "aw7"}], "AW") == "AW8"

    def test_gaps_never_reissue(self):
        records = [{"idNo": "H1"}, {"idNo": "H9"}]
        assert next_id(records, "H") == "H10"

    def test_other_prefixes_are_ignored_when_one_matches(self):
        records = [{"idNo": "AC40"}, {"idNo": "AW2"}]
        assert next_id(records, "AW") == "AW3"

    def test_prefix_must_be_followed_by_digits_only(self):
        records = [{"idNo": "H1"}, {"idNo": "H2-1"}, {"idNo": "HX5"}]
        assert next_id(records, "H") == "H2"

    def test_reads_snapshot_fields(self):
        snaps = [
            Snapshot(path="Active/HospitalData/H4", fields={"idNo": "H4"}, version=1),
            Snapshot(path="Archived/HospitalData/H6", fields={"idNo": "H6"}, version=3),
        ]
        assert next_id(snaps, "H") == "H7"

    def test_prefix_with_regex_characters(self):
        assert next_id([{"idNo": "JC-HC-2"}], "JC-HC-") == "JC-HC-3"

    def test_missing_identifier_counts_toward_fallback(self):
        assert next_id([{"name": "no id"}], "H") == "H2"


class TestNextSubId:
    def test_first_entry(self):
        assert next_sub_id([], "H12") == "H12-1"

    def test_continues_after_highest(self):
        existing = [{"id": "H12-1"}, {"id": "H12-4"}]
        assert next_sub_id(existing, "H12") == "H12-5"

    def test_requires_parent(self):
        with pytest.raises(ValueError):
            next_sub_id([], "")


class TestIdentifierPolicy:
    def test_validate_accepts_well_formed(self):
        policy = IdentifierPolicy(prefix="AW", max_digits=4)
        assert policy.validate("AW1")
        assert policy.validate("aw9999")

    def test_validate_rejects_leading_zero_and_overflow(self):
        policy = IdentifierPolicy(prefix="AW", max_digits=4)
        assert not policy.validate("AW01")
        assert not policy.validate("AW10000")
        assert not policy.validate("AC1")

    def test_rejects_empty_prefix(self):
        with pytest.raises(ValueError, match="prefix"):
            IdentifierPolicy(prefix="")

    def test_max_sequence_none_when_nothing_matches(self):
        assert max_sequence([{"idNo": "X1"}], IdentifierPolicy(prefix="H")) is None


class TestSequenceKey:
    def test_orders_by_trailing_number(self):
        ids = ["H10", "H9", "H1-10", "H1-2", "JC100"]
        assert sorted(ids, key=sequence_key) == ["H9", "H10", "H1-2", "H1-10", "JC100"]

    def test_ids_without_number_fall_back_to_text(self):
        assert sorted(["b", "A", "c"], key=sequence_key) == ["A", "b", "c"]
