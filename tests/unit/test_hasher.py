"""Unit tests for cdrexport.core.hasher — configuration change detection."""

from __future__ import annotations

from cdrexport.core.hasher import canonical_json_bytes, compute_table_hash, sha256_hex
from cdrexport.models.fields import FieldTable


class TestCanonicalJson:
    def test_key_order_is_irrelevant(self):
        assert canonical_json_bytes({"b": 1, "a": 2}) == canonical_json_bytes(
            {"a": 2, "b": 1}
        )

    def test_compact_separators(self):
        assert canonical_json_bytes({"a": [1, 2]}) == b'{"a":[1,2]}'


class TestTableHash:
    def test_sha256_hex_length(self):
        assert len(sha256_hex(b"")) == 64

    def test_equal_tables_hash_equal(self, make_field_table):
        assert compute_table_hash(make_field_table()) == compute_table_hash(
            make_field_table()
        )

    def test_column_order_changes_hash(self, make_field_table):
        a = make_field_table([("src", "${src}"), ("dst", "${dst}")])
        b = make_field_table([("dst", "${dst}"), ("src", "${src}")])
        assert compute_table_hash(a) != compute_table_hash(b)

    def test_filter_flag_changes_hash(self, make_field_table):
        plain = make_field_table()
        filtered = make_field_table(filter_enabled=True)
        assert compute_table_hash(plain) != compute_table_hash(filtered)

    def test_empty_table_hashes(self):
        assert len(compute_table_hash(FieldTable.empty())) == 64
