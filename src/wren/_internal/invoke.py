"""Call sync or async handler functions uniformly.

``HandlerFunc`` accepts both ``def`` and ``async def`` functions, so the
sync/async check lives here and nowhere else::

    result = await invoke(fn, w, request)
"""

import inspect
from typing import Any


async def invoke(fn: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *fn* and await the result if it is awaitable."""
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
