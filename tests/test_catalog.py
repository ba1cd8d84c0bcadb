"""Tests for the catalog facade implementations."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from entity_synth.errors import CatalogUnavailable, ConfigError, SchemaNotFound
from entity_synth.metadata import MySQLCatalog, SnapshotCatalog
from entity_synth.models import ConnectionConfig, DefaultKind, KeyClass, Table


class TestSnapshotCatalog:
    """Tests for the in-memory catalog and the shared point queries."""

    def test_table_order_is_stable(self, enrollment_catalog):
        first = enrollment_catalog.list_tables()
        assert first == ["student", "course", "student_course"]
        assert enrollment_catalog.list_tables() == first

    def test_columns_in_ordinal_order(self, library_catalog):
        names = [c.name for c in library_catalog.columns_of("book")]
        assert names == ["id", "title", "author_id", "published_on"]

    def test_unknown_table_raises(self, library_catalog):
        with pytest.raises(SchemaNotFound) as exc_info:
            library_catalog.columns_of("publisher")
        assert exc_info.value.table == "publisher"
        with pytest.raises(SchemaNotFound):
            library_catalog.foreign_keys_of("publisher")

    def test_is_join_table(self, enrollment_catalog, library_catalog):
        assert enrollment_catalog.is_join_table("student_course") is True
        assert enrollment_catalog.is_join_table("student") is False
        assert library_catalog.is_join_table("book") is False

    def test_join_table_allows_two_primary_columns(self, make_catalog):
        catalog = make_catalog([
            {
                "name": "tagging",
                "columns": [
                    {"name": "id", "raw_type": "int", "key_class": "PRI"},
                    {"name": "tenant", "raw_type": "int", "key_class": "PRI"},
                    {"name": "post_id", "raw_type": "int", "key_class": "MUL"},
                    {"name": "tag_id", "raw_type": "int", "key_class": "MUL"},
                ],
            },
        ])
        assert catalog.is_join_table("tagging") is True

    def test_three_foreign_keys_is_not_a_join_table(self, make_catalog):
        catalog = make_catalog([
            {
                "name": "triple",
                "columns": [
                    {"name": "a_id", "raw_type": "int", "key_class": "MUL"},
                    {"name": "b_id", "raw_type": "int", "key_class": "MUL"},
                    {"name": "c_id", "raw_type": "int", "key_class": "MUL"},
                ],
            },
        ])
        assert catalog.is_join_table("triple") is False

    def test_is_column_unique(self, profile_catalog):
        assert profile_catalog.is_column_unique("profile", "user_id") is True
        assert profile_catalog.is_column_unique("profile", "id") is True
        assert profile_catalog.is_column_unique("profile", "bio") is False

    def test_is_column_unique_unknown_column(self, profile_catalog):
        with pytest.raises(SchemaNotFound) as exc_info:
            profile_catalog.is_column_unique("profile", "nickname")
        assert exc_info.value.column == "nickname"

    def test_has_foreign_key_to(self, library_catalog):
        assert library_catalog.has_foreign_key_to("book", "author") is True
        assert library_catalog.has_foreign_key_to("author", "book") is False

    def test_secondary_foreign_key_column(self, enrollment_catalog, library_catalog):
        assert enrollment_catalog.secondary_foreign_key_column("student_course") == "course_id"
        assert enrollment_catalog.secondary_foreign_key_column(
            "student_course", excluding="course_id"
        ) == "student_id"
        assert library_catalog.secondary_foreign_key_column("book") is None

    def test_duplicate_table_rejected(self):
        with pytest.raises(ConfigError):
            SnapshotCatalog([Table(name="a"), Table(name="a")])

    def test_yaml_round_trip(self, tmp_path, library_catalog):
        path = library_catalog.to_yaml(tmp_path / "snap" / "library.yaml")
        restored = SnapshotCatalog.from_yaml(path)

        assert restored.list_tables() == library_catalog.list_tables()
        assert restored.columns_of("book") == library_catalog.columns_of("book")
        assert restored.foreign_keys_of("book") == library_catalog.foreign_keys_of("book")

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            SnapshotCatalog.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_invalid_content(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("tables:\n  - columns: []\n")
        with pytest.raises(ConfigError):
            SnapshotCatalog.from_yaml(path)


def _row(**values):
    return SimpleNamespace(_mapping=values)


SHOP_ROWS = {
    "information_schema.tables": [
        _row(TABLE_NAME="customer"),
        _row(TABLE_NAME="order"),
    ],
    "information_schema.columns": {
        "customer": [
            _row(column_name="id", data_type="int", is_nullable="NO",
                 column_key="PRI", extra="auto_increment", column_default=None),
            _row(column_name="email", data_type="varchar", is_nullable="YES",
                 column_key="UNI", extra="", column_default="NULL"),
        ],
        "order": [
            _row(column_name="id", data_type="int", is_nullable="NO",
                 column_key="PRI", extra="auto_increment", column_default=None),
            _row(column_name="customer_id", data_type="int", is_nullable="NO",
                 column_key="MUL", extra="", column_default=None),
            _row(column_name="placed_at", data_type="datetime", is_nullable="NO",
                 column_key="", extra="DEFAULT_GENERATED", column_default="CURRENT_TIMESTAMP"),
        ],
    },
    "information_schema.key_column_usage": {
        "customer": [],
        "order": [
            _row(constraint_name="fk_order_customer", source_column="customer_id",
                 target_table="customer", target_column="id"),
        ],
    },
}


@pytest.fixture
def config():
    return ConnectionConfig(
        database="shop",
        timeout=2,
        max_attempts=3,
        backoff_initial=0,
        backoff_max=0,
    )


@pytest.fixture
def engine():
    """Mock engine answering information_schema queries from SHOP_ROWS."""
    conn = MagicMock()

    def execute(clause, params):
        sql = str(clause)
        for source, rows in SHOP_ROWS.items():
            if source in sql:
                if isinstance(rows, dict):
                    return rows[params["table_name"]]
                return rows
        raise AssertionError(f"Unexpected query: {sql}")

    conn.execute.side_effect = execute
    mock_engine = MagicMock()
    mock_engine.connect.return_value.__enter__.return_value = conn
    mock_engine.conn = conn
    return mock_engine


class TestMySQLCatalog:
    """Tests for the MySQL reader against a mocked engine."""

    def test_list_tables(self, config, engine):
        catalog = MySQLCatalog(config, engine=engine)
        assert catalog.list_tables() == ["customer", "order"]

    def test_queries_are_scoped_to_database(self, config, engine):
        MySQLCatalog(config, engine=engine).list_tables()
        _, params = engine.conn.execute.call_args[0]
        assert params["schema"] == "shop"

    def test_column_normalization(self, config, engine):
        catalog = MySQLCatalog(config, engine=engine)
        pk, email = catalog.columns_of("customer")

        assert pk.is_primary_key is True
        assert pk.is_auto_increment is True
        assert pk.nullable is False
        assert pk.key_class == KeyClass.PRIMARY
        assert pk.default_kind == DefaultKind.NONE

        assert email.key_class == KeyClass.UNIQUE
        assert email.nullable is True
        assert email.default_kind == DefaultKind.NULL
        assert email.default_value is None

    def test_literal_default(self, config, engine):
        placed_at = MySQLCatalog(config, engine=engine).columns_of("order")[2]
        assert placed_at.default_kind == DefaultKind.LITERAL
        assert placed_at.default_value == "CURRENT_TIMESTAMP"
        assert placed_at.is_auto_increment is False

    def test_foreign_keys(self, config, engine):
        [edge] = MySQLCatalog(config, engine=engine).foreign_keys_of("order")
        assert edge.source_table == "order"
        assert edge.source_column == "customer_id"
        assert edge.target_table == "customer"
        assert edge.constraint_name == "fk_order_customer"

    def test_empty_result(self, config, engine):
        assert MySQLCatalog(config, engine=engine).foreign_keys_of("customer") == []

    def test_results_are_cached(self, config, engine):
        catalog = MySQLCatalog(config, engine=engine)
        catalog.columns_of("order")
        calls = engine.conn.execute.call_count
        catalog.columns_of("order")
        catalog.is_column_unique("order", "customer_id")
        assert engine.conn.execute.call_count == calls

    def test_unknown_table(self, config, engine):
        with pytest.raises(SchemaNotFound):
            MySQLCatalog(config, engine=engine).columns_of("refund")

    def test_connection_errors_are_retried_then_surface(self, config):
        conn = MagicMock()
        conn.execute.side_effect = OperationalError("SELECT", {}, Exception("timed out"))
        engine = MagicMock()
        engine.connect.return_value.__enter__.return_value = conn

        with pytest.raises(CatalogUnavailable):
            MySQLCatalog(config, engine=engine).list_tables()
        assert conn.execute.call_count == config.max_attempts

    def test_transient_error_recovers(self, config, engine):
        real = engine.conn.execute.side_effect
        failures = [OperationalError("SELECT", {}, Exception("gone away"))]

        def flaky(clause, params):
            if failures:
                raise failures.pop()
            return real(clause, params)

        engine.conn.execute.side_effect = flaky
        assert MySQLCatalog(config, engine=engine).list_tables() == ["customer", "order"]

    def test_non_connection_errors_are_not_retried(self, config):
        conn = MagicMock()
        conn.execute.side_effect = ProgrammingError("SELECT", {}, Exception("denied"))
        engine = MagicMock()
        engine.connect.return_value.__enter__.return_value = conn

        with pytest.raises(CatalogUnavailable):
            MySQLCatalog(config, engine=engine).list_tables()
        assert conn.execute.call_count == 1

    def test_snapshot(self, config, engine):
        snapshot = MySQLCatalog(config, engine=engine).snapshot()
        assert isinstance(snapshot, SnapshotCatalog)
        assert snapshot.has_foreign_key_to("order", "customer") is True

    def test_close_disposes_engine(self, config, engine):
        with MySQLCatalog(config, engine=engine) as catalog:
            catalog.list_tables()
        engine.dispose.assert_called_once()
