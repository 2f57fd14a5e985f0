"""Tests for index normalization of declared clauses and live rows."""

from types import SimpleNamespace

import pytest

from schema_delta.schema.indexes import indexes_from_rows, parse_index_clause
from schema_delta.schema.models import IndexColumn, IndexDef


class TestParseIndexClause:
    """Verify parse_index_clause() canonical forms."""

    def test_primary_key_has_no_name(self) -> None:
        """PRIMARY KEY renders with an empty name."""
        index = parse_index_clause("PRIMARY KEY  (ID)")
        assert index.kind == "PRIMARY KEY"
        assert index.name == ""
        assert index.canonical == "PRIMARY KEY  (`ID`)"

    def test_index_normalized_to_key(self) -> None:
        """INDEX is a synonym for KEY."""
        index = parse_index_clause("INDEX post_name (post_name)")
        assert index.canonical == "KEY `post_name` (`post_name`)"

    @pytest.mark.parametrize(
        ("clause", "kind"),
        [
            ("unique index a (a)", "UNIQUE KEY"),
            ("FULLTEXT  INDEX b (b)", "FULLTEXT KEY"),
            ("SPATIAL KEY c (c)", "SPATIAL KEY"),
        ],
    )
    def test_type_normalized(self, clause: str, kind: str) -> None:
        """Type is upper-cased with whitespace collapsed."""
        assert parse_index_clause(clause).kind == kind

    def test_name_lower_cased_and_backticks_removed(self) -> None:
        """Index names are lower-cased; column names keep their case."""
        index = parse_index_clause("KEY `Type_Status_Date` (`post_type`,`Post_Status`)")
        assert index.name == "type_status_date"
        assert [column.name for column in index.columns] == ["post_type", "Post_Status"]

    def test_prefix_lengths(self) -> None:
        """Both canonical forms are produced, with and without prefix lengths."""
        index = parse_index_clause("UNIQUE KEY `slug` (`slug`(20),`taxonomy`)")
        assert index.columns == [
            IndexColumn(name="slug", prefix_length=20),
            IndexColumn(name="taxonomy", prefix_length=None),
        ]
        assert index.canonical == "UNIQUE KEY `slug` (`slug`(20),`taxonomy`)"
        assert index.canonical_no_prefix == "UNIQUE KEY `slug` (`slug`,`taxonomy`)"

    def test_prefix_with_spaces(self) -> None:
        """Whitespace around a prefix length is tolerated."""
        index = parse_index_clause("KEY meta_key (meta_key ( 191 ))")
        assert index.canonical == "KEY `meta_key` (`meta_key`(191))"

    def test_unrecognized_clause(self) -> None:
        """Clauses without a recognised index shape yield None."""
        assert parse_index_clause("UNIQUE (id)") is None
        assert parse_index_clause("KEY broken") is None


class TestIndexesFromRows:
    """Verify indexes_from_rows() groups SHOW INDEX rows."""

    @staticmethod
    def _row(key_name, column, sub_part=None, non_unique=1, index_type="BTREE") -> dict:
        return {
            "Key_name": key_name,
            "Column_name": column,
            "Sub_part": sub_part,
            "Non_unique": non_unique,
            "Index_type": index_type,
        }

    def test_groups_by_key_name(self) -> None:
        """Rows of one key form one index in reported column order."""
        rows = [
            self._row("PRIMARY", "ID", non_unique=0),
            self._row("type_status_date", "post_type"),
            self._row("type_status_date", "post_status"),
            self._row("type_status_date", "post_date"),
        ]
        indexes = indexes_from_rows(rows)
        assert [index.canonical for index in indexes] == [
            "PRIMARY KEY  (`ID`)",
            "KEY `type_status_date` (`post_type`,`post_status`,`post_date`)",
        ]

    def test_unique_fulltext_spatial(self) -> None:
        """Uniqueness and index type decide the rendered kind."""
        rows = [
            self._row("slug", "slug", non_unique=0),
            self._row("body", "content", index_type="FULLTEXT"),
            self._row("geo", "location", index_type="SPATIAL"),
        ]
        kinds = [index.kind for index in indexes_from_rows(rows)]
        assert kinds == ["UNIQUE KEY", "FULLTEXT KEY", "SPATIAL KEY"]

    def test_sub_part_recorded(self) -> None:
        """Sub_part becomes the prefix length."""
        indexes = indexes_from_rows([self._row("name", "name", sub_part=191)])
        assert indexes[0].canonical == "KEY `name` (`name`(191))"
        assert indexes[0].canonical_no_prefix == "KEY `name` (`name`)"

    def test_key_name_lower_cased(self) -> None:
        """Key names compare lower-cased, matching declared indexes."""
        indexes = indexes_from_rows([self._row("Meta_Key", "meta_key")])
        assert indexes[0].name == "meta_key"

    def test_attribute_rows(self) -> None:
        """Attribute-style rows are read as well as dicts."""
        row = SimpleNamespace(
            Key_name="PRIMARY", Column_name="id", Sub_part=None, Non_unique=0, Index_type="BTREE"
        )
        assert indexes_from_rows([row])[0].canonical == "PRIMARY KEY  (`id`)"

    def test_matches_declared_form(self) -> None:
        """Live and declared renderings of the same index are identical."""
        declared = parse_index_clause("UNIQUE KEY term_id_taxonomy (term_id,taxonomy)")
        live = indexes_from_rows(
            [
                self._row("term_id_taxonomy", "term_id", non_unique=0),
                self._row("term_id_taxonomy", "taxonomy", non_unique=0),
            ]
        )
        assert live == [declared]

    def test_empty(self) -> None:
        """No rows, no indexes."""
        assert indexes_from_rows([]) == []


def test_index_def_built_directly() -> None:
    """IndexDef renders the same when built without parsing."""
    index = IndexDef(kind="KEY", name="k", columns=[IndexColumn(name="a", prefix_length=10)])
    assert index.canonical == "KEY `k` (`a`(10))"
