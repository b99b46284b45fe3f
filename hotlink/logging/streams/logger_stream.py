import asyncio
import datetime
import io
import os
import sys
import threading
from typing import Callable, Dict, TypeVar

import msgspec

from hotlink.logging.config import LoggingConfig, StreamType
from hotlink.logging.models import Entry, Log

T = TypeVar("T", bound=Entry)

DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"


class LoggerStream:
    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ) -> None:
        if name is None:
            name = "default"

        self._name = name
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

        self._init_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._config = LoggingConfig()
        self._encoder = msgspec.json.Encoder()

        self._files: Dict[str, io.TextIOWrapper] = {}
        self._default_logfile_path: str | None = None
        self._initialized = False
        self._closed = False

    @property
    def name(self):
        return self._name

    async def initialize(self):
        async with self._init_lock:
            if self._initialized:
                return

            if self._loop is None:
                self._loop = asyncio.get_running_loop()

            self._closed = False
            self._initialized = True

    async def open_file(
        self,
        filename: str,
        directory: str | None = None,
    ):
        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        logfile_path = self._to_logfile_path(filename, directory=directory)
        if logfile_path not in self._files:
            self._files[logfile_path] = await self._loop.run_in_executor(
                None,
                self._open_file,
                logfile_path,
            )

        self._default_logfile_path = logfile_path

    def _open_file(self, logfile_path: str):
        os.makedirs(os.path.dirname(logfile_path), exist_ok=True)
        return open(logfile_path, "a", encoding="utf-8")

    def _to_logfile_path(
        self,
        filename: str,
        directory: str | None = None,
    ):
        if directory is None:
            directory = os.path.join(os.getcwd(), "logs")

        return os.path.join(directory, filename)

    async def log(
        self,
        entry: T | Log[T],
        template: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if self._closed:
            return

        if self._initialized is False:
            await self.initialize()

        self._loop = asyncio.get_running_loop()

        if template is None:
            template = self._default_template

        if self._default_logfile_path:
            await self._log_to_file(
                entry,
                filter=filter,
            )

        else:
            await self._log(
                entry,
                template=template,
                filter=filter,
            )

    async def _log(
        self,
        entry_or_log: T | Log[T],
        template: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        entry = entry_or_log.entry if isinstance(entry_or_log, Log) else entry_or_log

        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        if template is None:
            template = DEFAULT_TEMPLATE

        if isinstance(entry_or_log, Log):
            log_file = entry_or_log.filename
            line_number = entry_or_log.line_number
            function_name = entry_or_log.function_name

        else:
            log_file, line_number, function_name = self._find_caller()

        stream = sys.stdout if self._config.output == StreamType.STDOUT else sys.stderr

        line = entry.to_template(
            template,
            context={
                "filename": log_file,
                "function_name": function_name,
                "line_number": line_number,
                "thread_id": threading.get_native_id(),
                "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            },
        )

        await self._loop.run_in_executor(
            None,
            self._write_line,
            stream,
            line,
        )

    async def _log_to_file(
        self,
        entry_or_log: T | Log[T],
        filter: Callable[[T], bool] | None = None,
    ):
        entry = entry_or_log.entry if isinstance(entry_or_log, Log) else entry_or_log

        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        if not isinstance(entry_or_log, Log):
            log_file, line_number, function_name = self._find_caller()
            entry_or_log = Log(
                entry=entry,
                filename=log_file,
                function_name=function_name,
                line_number=line_number,
            )

        logfile = self._files[self._default_logfile_path]

        await self._loop.run_in_executor(
            None,
            self._write_line,
            logfile,
            self._encoder.encode(entry_or_log).decode(),
        )

    def _write_line(self, stream: io.TextIOBase, line: str):
        stream.write(line + "\n")
        stream.flush()

    def _find_caller(self):
        try:
            frame = sys._getframe(3)

        except ValueError:
            return ("<unknown>", 0, "<unknown>")

        code = frame.f_code

        return (
            code.co_filename,
            frame.f_lineno,
            code.co_name,
        )

    async def close(self):
        self._closed = True
        self._initialized = False

        if self._files and self._loop:
            await self._loop.run_in_executor(
                None,
                self._close_files,
            )

    def _close_files(self):
        for logfile in self._files.values():
            if logfile.closed is False:
                logfile.close()

        self._files.clear()
        self._default_logfile_path = None
