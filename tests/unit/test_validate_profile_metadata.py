# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for profile import metadata validation."""

from typing import Any

import pytest
from sqlalchemy import create_engine, text

from src.domains.profile import (
    ErrorCode,
    ImportDatabaseReader,
    ImportProfileContext,
    ValidateProfileMetadata,
)
from src.infrastructure.database import DatabaseError


def write_export(path, rows: list[tuple[str, str]] | None) -> str:
    """Create an export database, without a meta_data table if rows is None."""
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE profiles (uid TEXT)"))
        if rows is not None:
            conn.execute(text("CREATE TABLE meta_data (key TEXT, value TEXT)"))
            for key, value in rows:
                conn.execute(
                    text("INSERT INTO meta_data (key, value) VALUES (:key, :value)"),
                    {"key": key, "value": value},
                )
    engine.dispose()
    return str(path)


class FakeReader:
    """Metadata reader returning fixed metadata."""

    def __init__(self, metadata: dict[str, Any]) -> None:
        self.metadata = metadata
        self.paths: list[str] = []

    async def read_metadata(self, db_file_path: str) -> dict[str, Any]:
        self.paths.append(db_file_path)
        return self.metadata


class TestValidateProfileMetadata:
    """Tests for ValidateProfileMetadata."""

    @pytest.mark.asyncio
    async def test_profile_export_is_accepted(self, tmp_path):
        """Test an export listing userprofile passes and carries its metadata."""
        path = write_export(
            tmp_path / "export.db",
            [("version", "20"), ("types", '["userprofile", "telemetry"]')],
        )
        context = ImportProfileContext(source_db_file_path=path)

        response = await ValidateProfileMetadata(ImportDatabaseReader()).execute(context)

        assert response.is_successful is True
        assert response.body is context
        assert context.metadata == {"version": "20", "types": ["userprofile", "telemetry"]}

    @pytest.mark.asyncio
    async def test_empty_metadata_fails(self, tmp_path):
        """Test an export without metadata rows is rejected."""
        path = write_export(tmp_path / "export.db", [])
        context = ImportProfileContext(source_db_file_path=path)

        response = await ValidateProfileMetadata(ImportDatabaseReader()).execute(context)

        assert response.error_mesg == ErrorCode.IMPORT_FAILED
        assert context.metadata is None

    @pytest.mark.asyncio
    async def test_other_export_type_fails(self, tmp_path):
        """Test a content export is not accepted as a profile import."""
        path = write_export(tmp_path / "export.db", [("types", '["content"]')])
        context = ImportProfileContext(source_db_file_path=path)

        response = await ValidateProfileMetadata(ImportDatabaseReader()).execute(context)

        assert response.is_successful is False
        assert response.error_mesg == ErrorCode.IMPORT_FAILED
        assert context.metadata == {"types": ["content"]}

    @pytest.mark.asyncio
    async def test_missing_types_fails(self):
        """Test metadata without a types entry is rejected."""
        reader = FakeReader({"version": "20"})
        context = ImportProfileContext(source_db_file_path="export.db")

        response = await ValidateProfileMetadata(reader).execute(context)

        assert response.error_mesg == ErrorCode.IMPORT_FAILED
        assert reader.paths == ["export.db"]

    @pytest.mark.asyncio
    async def test_plain_types_value(self, tmp_path):
        """Test a types value that is not JSON is read as a single type."""
        path = write_export(tmp_path / "export.db", [("types", "userprofile")])

        metadata = await ImportDatabaseReader().read_metadata(path)

        assert metadata == {"types": ["userprofile"]}

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        """Test a missing import file raises DatabaseError without creating it."""
        path = tmp_path / "missing.db"

        with pytest.raises(DatabaseError):
            await ImportDatabaseReader().read_metadata(str(path))

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_missing_table_raises(self, tmp_path):
        """Test a database without a meta_data table raises DatabaseError."""
        path = write_export(tmp_path / "export.db", None)

        with pytest.raises(DatabaseError):
            await ValidateProfileMetadata(ImportDatabaseReader()).execute(
                ImportProfileContext(source_db_file_path=path)
            )
