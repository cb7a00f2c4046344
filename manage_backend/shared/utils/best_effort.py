# manage_backend/shared/utils/best_effort.py

"""
Fail-open execution of non-critical store operations.

Every place where a session-tracking failure is tolerated goes through
``best_effort`` so the policy can be audited by searching for one name.
"""

import logging
from typing import Awaitable, Optional, Tuple, Type, TypeVar

from manage_backend.domain.exceptions import StoreUnavailableException

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def best_effort(
        awaitable: Awaitable[T],
        *,
        action: str,
        default: Optional[T] = None,
        tolerate: Tuple[Type[Exception], ...] = (StoreUnavailableException,),
) -> Optional[T]:
    """
    Await ``awaitable``; on a tolerated error log a warning and return ``default``.

    Args:
        awaitable: the operation to run
        action: short description used in the warning
        default: value returned when the operation fails
        tolerate: exception types treated as non-fatal

    Returns:
        The operation result, or ``default`` on a tolerated failure
    """
    try:
        return await awaitable
    except tolerate as e:
        logger.warning(f"Ignoring failure of non-critical action '{action}': {type(e).__name__}: {e}")
        return default
