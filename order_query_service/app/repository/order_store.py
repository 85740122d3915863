"""Order store: executes query descriptors against an async session."""

import asyncio
from typing import Any, Awaitable, Dict, List, Optional

from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import QueryCancelledError
from ..utils.logging import get_logger
from .query import QueryDescriptor

logger = get_logger("store")


class CancellationToken:
    """Caller-owned signal that aborts the store query currently in flight."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class OrderStore:
    """One store round trip per ``query`` call, counted in ``query_count``."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.query_count = 0

    async def query(
        self,
        descriptor: QueryDescriptor,
        params: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Any]:
        """Run ``descriptor`` and return its rows in result order.

        Rows are mapped entities, or whatever ``descriptor.projection``
        builds from each row when the descriptor selects columns.
        """
        if cancel_token is not None and cancel_token.cancelled:
            raise QueryCancelledError(descriptor.name)

        self.query_count += 1
        statement = descriptor.to_statement()
        try:
            execution = self.session.execute(statement, params or None)
            if cancel_token is None:
                result = await execution
            else:
                result = await self._execute_cancellable(
                    descriptor.name, execution, cancel_token
                )
            rows = self._rows(descriptor, result)
        except SQLAlchemyError as e:
            logger.warning(
                "Store query failed",
                extra={
                    "query": descriptor.name,
                    "error_type": type(e).__name__,
                },
            )
            raise

        logger.debug(
            "Store query executed",
            extra={
                "query": descriptor.name,
                "row_count": len(rows),
                "query_number": self.query_count,
            },
        )
        return rows

    async def _execute_cancellable(
        self,
        name: str,
        execution: Awaitable[Result],
        cancel_token: CancellationToken,
    ) -> Result:
        query_task = asyncio.ensure_future(execution)
        cancel_task = asyncio.ensure_future(cancel_token.wait())
        try:
            done, _ = await asyncio.wait(
                {query_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            query_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if query_task in done:
            return query_task.result()

        query_task.cancel()
        try:
            await query_task
        except asyncio.CancelledError:
            pass
        logger.info("Store query cancelled", extra={"query": name})
        raise QueryCancelledError(name)

    @staticmethod
    def _rows(descriptor: QueryDescriptor, result: Result) -> List[Any]:
        if descriptor.columns:
            mappings = result.mappings().all()
            if descriptor.projection is None:
                return list(mappings)
            return [descriptor.projection(mapping) for mapping in mappings]
        if descriptor.unique:
            result = result.unique()
        return list(result.scalars().all())
