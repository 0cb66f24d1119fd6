from __future__ import annotations

import asyncio
import json
import logging
import os

import aiofiles
from aiofiles.threadpool.text import AsyncTextIOWrapper


class ExtraDataFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        if data := getattr(record, "data", None):
            return f"{super().format(record)}; data={json.dumps(data, default=str)}"
        return super().format(record)


class AsyncFileHandler(logging.Handler):
    """File handler that writes through aiofiles when called inside a running event loop,
    and falls back to a blocking write otherwise (or when the record has `_sync=True`)"""

    def __init__(
        self,
        filename: str,
        mode: str = "a",
        encoding: str = None,
        level: str | int = logging.NOTSET,
    ):
        super().__init__(level=level)
        self.file_path = os.path.abspath(filename)
        self.mode = mode
        self.encoding = encoding
        os.makedirs(os.path.dirname(self.file_path), exist_ok=True)

        self._stream: AsyncTextIOWrapper | None = None
        self._stream_loop: asyncio.AbstractEventLoop | None = None
        self._lock: asyncio.Lock | None = None
        self._tasks: set[asyncio.Task] = set()

    def handle(self, record: logging.LogRecord) -> bool:
        if rv := self.filter(record):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is None or getattr(record, "_sync", False):
                self.emit(record)
            else:
                task = loop.create_task(self._emit(loop, record))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
        return rv

    def close(self):
        if self._stream_loop is not None and self._stream_loop.is_running():
            self._stream_loop.create_task(self.close_stream())
        super().close()

    async def close_stream(self):
        await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._stream is None:
            return
        await self._stream.flush()
        await self._stream.close()
        self._stream = None

    def emit(self, record: logging.LogRecord):
        try:
            with open(self.file_path, self.mode, encoding=self.encoding) as f:
                f.write(self.format(record) + "\n")
        except Exception:
            self.handleError(record)

    async def _emit(self, loop: asyncio.AbstractEventLoop, record: logging.LogRecord):
        try:
            if self._stream_loop is not loop:
                # Streams and locks are bound to the loop that created them
                self._stream, self._stream_loop, self._lock = None, loop, asyncio.Lock()
            assert self._lock is not None
            async with self._lock:
                if self._stream is None:
                    self._stream = await aiofiles.open(
                        self.file_path, mode=self.mode, encoding=self.encoding  # type: ignore
                    )
                await self._stream.write(self.format(record) + "\n")
                await self._stream.flush()
        except (RuntimeError, asyncio.CancelledError):
            self.emit(record)
        except Exception:
            self.handleError(record)
