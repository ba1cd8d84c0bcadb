"""Shared catalog fixtures."""

import pytest

from entity_synth.metadata import SnapshotCatalog


def _pk(name="id"):
    return {
        "name": name,
        "raw_type": "int",
        "nullable": False,
        "key_class": "PRI",
        "is_auto_increment": True,
    }


@pytest.fixture
def make_catalog():
    """Factory building a SnapshotCatalog from plain table dicts."""
    def _make(tables):
        return SnapshotCatalog.from_dict({"tables": tables})
    return _make


@pytest.fixture
def library_tables():
    """author(id) <- book(author_id), no reverse edge."""
    return [
        {
            "name": "author",
            "columns": [
                _pk(),
                {"name": "full_name", "raw_type": "varchar(255)", "nullable": False},
            ],
        },
        {
            "name": "book",
            "columns": [
                _pk(),
                {"name": "title", "raw_type": "varchar(255)", "nullable": False},
                {"name": "author_id", "raw_type": "int", "nullable": False, "key_class": "MUL"},
                {
                    "name": "published_on",
                    "raw_type": "date",
                    "default_kind": "null",
                },
            ],
            "foreign_keys": [
                {
                    "source_column": "author_id",
                    "target_table": "author",
                    "target_column": "id",
                    "constraint_name": "fk_book_author",
                },
            ],
        },
    ]


@pytest.fixture
def library_catalog(make_catalog, library_tables):
    return make_catalog(library_tables)


@pytest.fixture
def profile_catalog(make_catalog):
    """user(id) <- profile(user_id UNIQUE)."""
    return make_catalog([
        {"name": "user", "columns": [_pk()]},
        {
            "name": "profile",
            "columns": [
                _pk(),
                {"name": "user_id", "raw_type": "int", "nullable": False, "key_class": "UNI"},
                {"name": "bio", "raw_type": "text"},
            ],
            "foreign_keys": [
                {
                    "source_column": "user_id",
                    "target_table": "user",
                    "target_column": "id",
                    "constraint_name": "fk_profile_user",
                },
            ],
        },
    ])


@pytest.fixture
def enrollment_tables():
    """student / course joined through student_course."""
    return [
        {"name": "student", "columns": [_pk(), {"name": "name", "raw_type": "varchar(80)"}]},
        {"name": "course", "columns": [_pk(), {"name": "title", "raw_type": "varchar(80)"}]},
        {
            "name": "student_course",
            "columns": [
                {"name": "student_id", "raw_type": "int", "nullable": False, "key_class": "MUL"},
                {"name": "course_id", "raw_type": "int", "nullable": False, "key_class": "MUL"},
            ],
            "foreign_keys": [
                {
                    "source_column": "student_id",
                    "target_table": "student",
                    "target_column": "id",
                    "constraint_name": "fk_sc_student",
                },
                {
                    "source_column": "course_id",
                    "target_table": "course",
                    "target_column": "id",
                    "constraint_name": "fk_sc_course",
                },
            ],
        },
    ]


@pytest.fixture
def enrollment_catalog(make_catalog, enrollment_tables):
    return make_catalog(enrollment_tables)
