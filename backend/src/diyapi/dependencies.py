"""Shared FastAPI dependencies.

Reusable type aliases and dependency functions that routers import.
Defined here (not in main.py) to avoid circular imports when routers
are registered in main.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from diyapi.config import Settings, settings
from diyapi.db.session import get_db


def get_settings() -> Settings:
    """Return application settings; tests override this dependency."""
    return settings


DB = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
