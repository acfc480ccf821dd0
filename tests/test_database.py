import pytest
from unittest.mock import MagicMock, patch
from sqlalchemy import inspect
from sqlmodel import Session

from app.database.database import create_db_and_tables, engine, get_session


class TestCreateDbAndTables:
    """Test create_db_and_tables function."""

    @patch("app.database.database.SQLModel")
    def test_creates_all_tables(self, mock_sqlmodel):
        """Table creation runs against the module engine."""
        mock_sqlmodel.metadata = MagicMock()

        create_db_and_tables()

        mock_sqlmodel.metadata.create_all.assert_called_once_with(engine)

    @patch("app.database.database.SQLModel")
    def test_errors_propagate(self, mock_sqlmodel):
        """Schema errors are not swallowed."""
        mock_sqlmodel.metadata = MagicMock()
        mock_sqlmodel.metadata.create_all.side_effect = RuntimeError("Database error")

        with pytest.raises(RuntimeError, match="Database error"):
            create_db_and_tables()


class TestSchema:
    """Test the table layout created from the models."""

    def test_moderation_tables_exist(self, engine):
        """Every model registers its table."""
        tables = set(inspect(engine).get_table_names())
        assert {"user", "property", "booking", "spam_report", "notification"} <= tables

    def test_report_lookup_indexes(self, engine):
        """Reports are indexed for the moderation queue queries."""
        indexed = {
            column
            for index in inspect(engine).get_indexes("spam_report")
            for column in index["column_names"]
        }
        assert {"status", "priority", "content_id", "id_user_reported"} <= indexed


class TestGetSession:
    """Test get_session dependency."""

    def test_yields_session(self):
        """A Session is yielded and the generator finishes cleanly."""
        generator = get_session()
        session = next(generator)

        assert isinstance(session, Session)
        with pytest.raises(StopIteration):
            next(generator)
