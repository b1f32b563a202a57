from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

M = TypeVar("M", bound=SQLModel)


class Repository(Generic[M]):
    _model: type[M]

    def __init__(self, session: AsyncSession):
        self._session = session
