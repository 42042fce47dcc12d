"""FastAPI dependency selecting the resource repository for the storage mode."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newbridge.config import settings
from newbridge.database.session import get_db
from newbridge.modules.directory.file_repository import FileResourceRepository
from newbridge.modules.directory.repository import ResourceRepository
from newbridge.modules.directory.sql_repository import SqlResourceRepository


def get_resource_repository(db: AsyncSession = Depends(get_db)) -> ResourceRepository:
    if settings.use_database:
        return SqlResourceRepository(db)
    return FileResourceRepository(settings.config_dir, settings.data_dir)
