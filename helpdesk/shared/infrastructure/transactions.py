"""
Transaction Runner
==================

Runs a piece of work inside a fresh unit of work and commits it. When a
concurrent writer wins the race (ConflictException) the whole unit is
retried against refreshed state, up to ``max_attempts`` times. Any other
error propagates on the first occurrence.
"""

from typing import Awaitable, Callable, TypeVar

from helpdesk.core import ConflictException, IUnitOfWork
from helpdesk.shared.infrastructure.logging import get_logger, operation_context

logger = get_logger(__name__)

T = TypeVar("T")

UnitOfWorkFactory = Callable[[], IUnitOfWork]


async def run_in_transaction(
    uow_factory: UnitOfWorkFactory,
    work: Callable[[IUnitOfWork], Awaitable[T]],
    *,
    operation: str,
    max_attempts: int = 5,
) -> T:
    """
    Execute ``work`` atomically, retrying on lost races.

    Args:
        uow_factory: Produces a new unit of work per attempt
        work: Coroutine function receiving the unit of work
        operation: Name used in logs
        max_attempts: Attempts before the ConflictException is re-raised

    Returns:
        Whatever ``work`` returned on the committed attempt
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            with operation_context(operation):
                async with uow_factory() as uow:
                    result = await work(uow)
                    await uow.commit()
                    return result
        except ConflictException as e:
            if attempt >= max_attempts:
                logger.error(
                    "Concurrent update retries exhausted",
                    extra={"operation": operation, "attempts": attempt, "error": e.message}
                )
                raise
            logger.warning(
                "Concurrent update lost, retrying",
                extra={"operation": operation, "attempt": attempt, "error": e.message}
            )


async def run_read_only(
    uow_factory: UnitOfWorkFactory,
    work: Callable[[IUnitOfWork], Awaitable[T]],
) -> T:
    """Execute ``work`` in a unit of work that is never committed."""
    async with uow_factory() as uow:
        return await work(uow)
