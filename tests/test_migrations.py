"""
Tests for the Alembic revisions: every script loads and the chain builds the
same schema as the models on a fresh database.
"""

from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect

import helpdesk.db.base  # noqa: F401
from helpdesk.db.session import Base

ALEMBIC_DIR = Path(__file__).parent.parent / "alembic"


@pytest.fixture
def script_directory():
    return ScriptDirectory(str(ALEMBIC_DIR))


@pytest.fixture
def fresh_engine():
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()


def _run(engine, script_directory: ScriptDirectory, direction: str) -> None:
    revisions = list(script_directory.walk_revisions())
    if direction == "upgrade":
        revisions.reverse()
    with engine.begin() as connection:
        context = MigrationContext.configure(connection)
        with Operations.context(context):
            for revision in revisions:
                getattr(revision.module, direction)()


class TestRevisionScripts:
    """Tests for the revision chain."""

    def test_single_head(self, script_directory):
        """Test that every revision script loads and the chain has one head."""
        assert script_directory.get_heads() == ["0001"]

    def test_upgrade_creates_model_tables(self, fresh_engine, script_directory):
        """Test that upgrading from empty yields the tables and columns of the models."""
        _run(fresh_engine, script_directory, "upgrade")

        inspector = inspect(fresh_engine)
        assert set(inspector.get_table_names()) == set(Base.metadata.tables)
        for name, table in Base.metadata.tables.items():
            migrated = {column["name"] for column in inspector.get_columns(name)}
            assert migrated == set(table.columns.keys()), name

    def test_feedback_is_unique_per_ticket(self, fresh_engine, script_directory):
        """Test that the one-feedback-per-ticket constraint is part of the schema."""
        _run(fresh_engine, script_directory, "upgrade")

        constraints = inspect(fresh_engine).get_unique_constraints("ticket_feedback")

        assert ["ticket_id"] in [c["column_names"] for c in constraints]

    def test_downgrade_removes_everything(self, fresh_engine, script_directory):
        _run(fresh_engine, script_directory, "upgrade")
        _run(fresh_engine, script_directory, "downgrade")

        assert inspect(fresh_engine).get_table_names() == []
