# =============================================================================
# GOVERNANCE DECISION ENGINE - SYNC / ASYNC COLLABORATORS
# =============================================================================
#
# Evaluators and collaborators may be plain or async implementations.
# The engine calls them and awaits the result only when it is awaitable,
# so both kinds plug in without adapters.
#
# =============================================================================

import inspect
from typing import Any


async def resolve(result: Any) -> Any:
    """Await result if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(result):
        return await result
    return result
