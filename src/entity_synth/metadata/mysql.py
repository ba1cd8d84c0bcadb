"""
MySQL catalog reader using SQLAlchemy over PyMySQL.

Reads table, column and foreign key metadata from information_schema and
normalizes each row once into Column / ForeignKeyEdge records.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from entity_synth.errors import CatalogUnavailable, SchemaNotFound
from entity_synth.metadata.catalog import Catalog
from entity_synth.models import Column, ConnectionConfig, DefaultKind, ForeignKeyEdge, KeyClass

logger = logging.getLogger(__name__)


TABLES_SQL = """
    SELECT table_name AS table_name
    FROM information_schema.tables
    WHERE table_schema = :schema
        AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

COLUMNS_SQL = """
    SELECT
        column_name AS column_name,
        data_type AS data_type,
        is_nullable AS is_nullable,
        column_key AS column_key,
        extra AS extra,
        column_default AS column_default
    FROM information_schema.columns
    WHERE table_schema = :schema
        AND table_name = :table_name
    ORDER BY ordinal_position
"""

FOREIGN_KEYS_SQL = """
    SELECT
        constraint_name AS constraint_name,
        column_name AS source_column,
        referenced_table_name AS target_table,
        referenced_column_name AS target_column
    FROM information_schema.key_column_usage
    WHERE table_schema = :schema
        AND table_name = :table_name
        AND referenced_table_name IS NOT NULL
    ORDER BY constraint_name, ordinal_position
"""


class MySQLCatalog(Catalog):
    """
    Catalog facade over a live MySQL schema.

    Results are cached per table for the lifetime of the instance, so one
    instance is one immutable snapshot of the schema. Every query runs
    with the configured timeout; connection errors are retried with
    bounded exponential backoff and then surface as CatalogUnavailable.
    """

    def __init__(self, config: ConnectionConfig, engine: Optional[Engine] = None):
        """
        Initialize the catalog.

        Args:
            config: Connection descriptor, including timeout and retry limits
            engine: Optional pre-built engine (the default is created lazily)
        """
        self.config = config
        self._engine = engine
        self._tables: Optional[List[str]] = None
        self._columns: Dict[str, List[Column]] = {}
        self._foreign_keys: Dict[str, List[ForeignKeyEdge]] = {}

    def connect(self) -> Engine:
        """Create the engine if needed."""
        if self._engine is None:
            self._engine = create_engine(
                self.config.url(),
                connect_args=self.config.connect_args(),
                pool_pre_ping=True,
            )
            logger.info(f"Connecting to MySQL catalog {self.config.describe()}")
        return self._engine

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _fetch(self, sql: str, **params: Any) -> List[Dict[str, Any]]:
        """Run a metadata query, returning rows keyed by lower-case column name."""
        engine = self.connect()
        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(
                multiplier=self.config.backoff_initial,
                max=self.config.backoff_max,
            ),
            retry=retry_if_exception_type(OperationalError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    with engine.connect() as conn:
                        result = conn.execute(text(sql), {"schema": self.config.database, **params})
                        return [
                            {str(k).lower(): v for k, v in row._mapping.items()}
                            for row in result
                        ]
        except SQLAlchemyError as e:
            raise CatalogUnavailable(
                f"Catalog query failed for {self.config.describe()}: {e}"
            ) from e

    def list_tables(self) -> List[str]:
        if self._tables is None:
            rows = self._fetch(TABLES_SQL)
            self._tables = [row["table_name"] for row in rows]
            logger.info(f"Found {len(self._tables)} tables in {self.config.database}")
        return list(self._tables)

    def _require(self, table: str) -> None:
        if table not in self.list_tables():
            raise SchemaNotFound(table)

    def columns_of(self, table: str) -> List[Column]:
        if table not in self._columns:
            self._require(table)
            rows = self._fetch(COLUMNS_SQL, table_name=table)
            self._columns[table] = [self._to_column(row) for row in rows]
        return list(self._columns[table])

    def foreign_keys_of(self, table: str) -> List[ForeignKeyEdge]:
        if table not in self._foreign_keys:
            self._require(table)
            rows = self._fetch(FOREIGN_KEYS_SQL, table_name=table)
            self._foreign_keys[table] = [
                ForeignKeyEdge(
                    source_table=table,
                    source_column=row["source_column"],
                    target_table=row["target_table"],
                    target_column=row["target_column"],
                    constraint_name=row["constraint_name"],
                )
                for row in rows
            ]
        return list(self._foreign_keys[table])

    @staticmethod
    def _to_column(row: Dict[str, Any]) -> Column:
        """Normalize one information_schema.columns row."""
        key = (row.get("column_key") or "").upper()
        try:
            key_class = KeyClass(key)
        except ValueError:
            key_class = KeyClass.NONE

        default = row.get("column_default")
        if default is None:
            default_kind = DefaultKind.NONE
        elif str(default).upper() == "NULL":
            # MariaDB reports an explicit DEFAULT NULL as the string 'NULL'
            default_kind = DefaultKind.NULL
            default = None
        else:
            default_kind = DefaultKind.LITERAL
            default = str(default)

        return Column(
            name=row["column_name"],
            raw_type=row["data_type"],
            nullable=(row.get("is_nullable") or "").upper() == "YES",
            is_primary_key=key_class == KeyClass.PRIMARY,
            is_auto_increment="auto_increment" in (row.get("extra") or "").lower(),
            key_class=key_class,
            default_kind=default_kind,
            default_value=default,
        )
