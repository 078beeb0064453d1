from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
import importlib
from typing import Any

from domain_request.domain.errors import RepositoryError
from domain_request.domain.ids import new_submission_public_id
from domain_request.domain.models import Submission, SubmissionListQuery
from domain_request.repositories.sql_loader import load_sql

try:
    asyncpg_module = importlib.import_module("asyncpg")
except ModuleNotFoundError:  # pragma: no cover
    asyncpg_module = None  # type: ignore[assignment]


SQL_INSERT_SUBMISSION = load_sql("insert_submission.sql")
SQL_LIST_BY_USER = load_sql("list_submissions_by_user.sql")
SQL_LIST_BY_EMAIL = load_sql("list_submissions_by_email.sql")


def _is_unique_violation(exc: Exception) -> bool:
    return getattr(exc, "sqlstate", None) == "23505"


@dataclass
class AsyncpgPoolManager:
    dsn: str
    pool: Any | None = None

    async def startup(self) -> None:
        if asyncpg_module is None:  # pragma: no cover
            raise RuntimeError("asyncpg is required for postgres repository mode")

        self.pool = await asyncpg_module.create_pool(
            dsn=self.dsn,
            min_size=1,
            max_size=5,
        )

    async def shutdown(self) -> None:
        if self.pool is None:
            return
        await self.pool.close()
        self.pool = None


@dataclass
class PostgresSubmissionRepository:
    pool_manager: AsyncpgPoolManager

    def _pool(self) -> Any:
        if self.pool_manager.pool is None:
            raise RuntimeError("postgres pool is not initialized")
        return self.pool_manager.pool

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[Any]:
        # Pool and connect failures surface as RepositoryError like query failures.
        try:
            pool = self._pool()
            conn = await pool.acquire()
        except Exception as exc:
            raise RepositoryError(f"database is unavailable: {exc}") from exc
        try:
            yield conn
        finally:
            await pool.release(conn)

    async def insert_submission(
        self,
        *,
        name: str,
        email: str,
        purpose: str,
        platform_link: str,
        user_id: str | None,
        status: str,
    ) -> Submission:
        async with self._connection() as conn:
            for _ in range(5):
                submission_id = new_submission_public_id()
                try:
                    row = await conn.fetchrow(
                        SQL_INSERT_SUBMISSION,
                        submission_id,
                        name,
                        email,
                        purpose,
                        platform_link,
                        user_id,
                        status,
                    )
                except Exception as exc:
                    if _is_unique_violation(exc):
                        continue
                    raise RepositoryError(f"failed to store submission: {exc}") from exc
                if row is None:
                    raise RepositoryError("insert returned no row")
                return _submission_from_row(row)
        raise RepositoryError("failed to allocate unique submission public id")

    async def list_submissions(self, *, query: SubmissionListQuery) -> list[Submission]:
        if query.user_id is not None:
            sql, owner = SQL_LIST_BY_USER, query.user_id
        elif query.email is not None:
            sql, owner = SQL_LIST_BY_EMAIL, query.email
        else:
            raise ValueError("listing requires an owner filter (user_id or email)")

        async with self._connection() as conn:
            try:
                rows = await conn.fetch(sql, owner, query.sort_order.value, query.limit)
            except Exception as exc:
                raise RepositoryError(f"failed to list submissions: {exc}") from exc
        return [_submission_from_row(row) for row in rows]


def _submission_from_row(row: Any) -> Submission:
    return Submission(
        submission_id=row["public_id"],
        name=row["name"],
        email=row["email"],
        purpose=row["purpose"],
        platform_link=row["platform_link"],
        user_id=row["user_id"],
        status=row["status"],
        created_at=row["created_at"],
    )
