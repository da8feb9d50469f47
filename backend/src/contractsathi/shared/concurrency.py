"""Bounded offloading of blocking work to threads.

Two independent limits: document work (PDF and DOCX parsing, report
rendering) is CPU heavy and capped near the core count, while storage calls
mostly wait on the network and get a wider cap. A burst of uploads therefore
cannot starve report uploads, and neither can exhaust the default executor.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from typing import ParamSpec, TypeVar

_P = ParamSpec("_P")
_T = TypeVar("_T")

_CPU = os.cpu_count() or 4


class BlockingLimiter:
    """Run sync callables via :func:`asyncio.to_thread`, at most ``limit`` at once."""

    def __init__(self, name: str, limit: int) -> None:
        self.name = name
        self.limit = max(1, limit)
        self._semaphore = asyncio.Semaphore(self.limit)

    async def run(self, func: Callable[_P, _T], /, *args: _P.args, **kwargs: _P.kwargs) -> _T:
        async with self._semaphore:
            return await asyncio.to_thread(func, *args, **kwargs)


document_work = BlockingLimiter(
    "document", int(os.getenv("CONTRACTSATHI_DOCUMENT_THREADS", str(max(2, _CPU))))
)
storage_io = BlockingLimiter(
    "storage", int(os.getenv("CONTRACTSATHI_STORAGE_THREADS", str(min(32, _CPU * 4))))
)
