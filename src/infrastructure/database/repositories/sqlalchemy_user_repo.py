"""SQLAlchemy implementation of User repository."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import StoreError, UsernameTakenError
from domain.entities.user import User
from infrastructure.database.models import UserModel


@contextmanager
def translate_errors() -> Iterator[None]:
    """Surface driver failures as StoreError."""
    try:
        yield
    except SQLAlchemyError as e:
        raise StoreError(f"database error: {e}") from e


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: str) -> User | None:
        """Get a user by ID."""
        with translate_errors():
            model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def list(self) -> list[User]:
        """Get every user, in insertion order."""
        stmt = select(UserModel).order_by(UserModel.seq)
        with translate_errors():
            result = await self._session.execute(stmt)
            return [self._to_entity(model) for model in result.scalars()]

    async def find_by_username(self, username: str) -> User | None:
        """Get a user by exact username."""
        stmt = select(UserModel).where(UserModel.username == username)
        with translate_errors():
            result = await self._session.execute(stmt)
            model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def upsert(self, user: User) -> User:
        """Insert or update; the unique index backs username uniqueness."""
        try:
            with translate_errors():
                model = await self._get_model(user.id)
                if model is None:
                    model = UserModel(id=user.id)
                    self._session.add(model)
                model.username = user.username
                model.password = user.password
                model.email = user.email
                model.first_name = user.first_name
                model.last_name = user.last_name
                model.avatar = user.avatar
                await self._session.flush()
        except StoreError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise UsernameTakenError(user.username) from e.__cause__
            raise
        return self._to_entity(model)

    async def _get_model(self, id: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            password=model.password,
            email=model.email,
            first_name=model.first_name,
            last_name=model.last_name,
            avatar=model.avatar,
        )
