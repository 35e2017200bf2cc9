# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Validation of exported profile database files before import.

An exported file is a SQLite database carrying a ``meta_data`` table of
key/value rows. The ``types`` entry lists what the export contains and must
include ``userprofile`` for a profile import.

Example:
    validator = ValidateProfileMetadata(ImportDatabaseReader())
    response = await validator.execute(
        ImportProfileContext(source_db_file_path="/sdcard/profiles.db")
    )
    if not response.is_successful:
        ...
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from src.domains.profile.models import ErrorCode, ImportProfileContext, Response
from src.infrastructure.database import DatabaseError

logger = logging.getLogger(__name__)

META_DATA_TABLE = "meta_data"
USER_PROFILE_IMPORT_TYPE = "userprofile"


class MetadataReader(Protocol):
    async def read_metadata(self, db_file_path: str) -> dict[str, Any]: ...


class ImportDatabaseReader:
    """Reads the metadata table of an exported SQLite database."""

    def _read(self, db_file_path: str) -> dict[str, Any]:
        engine = create_engine(f"sqlite:///{Path(db_file_path)}")
        try:
            with engine.connect() as conn:
                rows = conn.execute(
                    text(f"SELECT key, value FROM {META_DATA_TABLE}")
                ).all()
        finally:
            engine.dispose()

        metadata: dict[str, Any] = {}
        for key, value in rows:
            metadata[key] = _decode_value(key, value)
        return metadata

    async def read_metadata(self, db_file_path: str) -> dict[str, Any]:
        """Return the metadata entries of an exported database.

        Args:
            db_file_path: Path of the SQLite file.

        Returns:
            Mapping of metadata keys to values, empty when the table is empty.

        Raises:
            DatabaseError: If the file cannot be opened or has no metadata table.
        """
        if not Path(db_file_path).is_file():
            raise DatabaseError(f"Import file not found: {db_file_path}")
        try:
            return await asyncio.to_thread(self._read, db_file_path)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to read metadata from {db_file_path}", e) from e


def _decode_value(key: str, value: Any) -> Any:
    if key != "types" or not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return [value]


def _import_types(metadata: dict[str, Any]) -> list[str]:
    types = metadata.get("types")
    if types is None:
        return []
    if isinstance(types, str):
        return [types]
    return list(types)


class ValidateProfileMetadata:
    """Checks that a database file is a profile export."""

    def __init__(self, reader: MetadataReader) -> None:
        self._reader = reader

    async def execute(self, import_context: ImportProfileContext) -> Response:
        """Validate the export metadata and attach it to the context.

        Args:
            import_context: Import in progress.

        Returns:
            Response whose body is the context on success, or whose
            error_mesg is IMPORT_FAILED when the file has no metadata or is
            not a profile export.

        Raises:
            DatabaseError: If the file cannot be read.
        """
        metadata = await self._reader.read_metadata(import_context.source_db_file_path)
        if not metadata:
            logger.warning(
                "Profile import rejected, no metadata in %s",
                import_context.source_db_file_path,
            )
            return Response(error_mesg=ErrorCode.IMPORT_FAILED)

        import_context.metadata = metadata

        if USER_PROFILE_IMPORT_TYPE not in _import_types(metadata):
            logger.warning(
                "Profile import rejected, %s is not a profile export",
                import_context.source_db_file_path,
            )
            return Response(error_mesg=ErrorCode.IMPORT_FAILED)

        return Response(body=import_context)
