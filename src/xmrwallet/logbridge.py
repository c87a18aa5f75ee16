"""
Forward stdlib logging output into a single channel.

Wallet-engine side libraries (httpx, httpcore, anything built on `logging`)
write through the stdlib logging tree. Once installed, the bridge:

- removes every existing handler so nothing is printed or written directly,
- maps each record onto a 5-level scale (trace=0 .. error=4),
- hands (channel, level, file, line, function, message) to one sink,
- silences the high-volume PERF timer logger entirely.

The bridge owns process-wide state (the logging tree is shared), so it is
installed at most once and restores everything it touched on uninstall.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

# Performance timer logger that floods output with timing lines
PERF_LOGGER = "PERF"

LEVEL_TRACE = 0
LEVEL_DEBUG = 1
LEVEL_INFO = 2
LEVEL_WARNING = 3
LEVEL_ERROR = 4

_LOGURU_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class ForwardedLog:
    channel: str
    level: int
    file: str
    line: int
    function: str
    message: str


LogSink = Callable[[ForwardedLog], None]


def map_level(levelno: int) -> int:
    """Map a stdlib logging level onto the 0-4 forwarding scale."""
    if levelno < logging.DEBUG:
        return LEVEL_TRACE
    if levelno < logging.INFO:
        return LEVEL_DEBUG
    if levelno < logging.WARNING:
        return LEVEL_INFO
    if levelno < logging.ERROR:
        return LEVEL_WARNING
    return LEVEL_ERROR


def loguru_sink(record: ForwardedLog) -> None:
    """Re-emit a forwarded record through loguru."""
    logger.bind(
        channel=record.channel,
        source_file=record.file,
        source_line=record.line,
        source_function=record.function,
    ).log(_LOGURU_LEVELS[record.level], f"{record.channel}: {record.message}")


class _ForwardingHandler(logging.Handler):
    def __init__(self, channel: str, sink: LogSink):
        super().__init__(level=logging.NOTSET)
        self.channel = channel
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.exc_info:
                message = f"{message}\n{logging.Formatter().formatException(record.exc_info)}"
            self.sink(
                ForwardedLog(
                    channel=self.channel,
                    level=map_level(record.levelno),
                    file=record.pathname or "",
                    line=record.lineno,
                    function=record.funcName or "",
                    message=message,
                )
            )
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        if self.sink is loguru_sink:
            # Drain enqueued loguru handlers
            logger.complete()
            return
        flush = getattr(self.sink, "flush", None)
        if callable(flush):
            flush()


@dataclass
class _SavedLogger:
    handlers: list[logging.Handler]
    propagate: bool


class LogBridge:
    """
    Install-once forwarding of the stdlib logging tree into a sink.
    """

    def __init__(self, sink: LogSink = loguru_sink):
        self.sink = sink
        self._lock = threading.Lock()
        self._handler: _ForwardingHandler | None = None
        self._saved_loggers: dict[str, _SavedLogger] = {}
        self._saved_root: _SavedLogger | None = None
        self._saved_root_level = logging.WARNING
        self._saved_perf_disabled = False

    @property
    def installed(self) -> bool:
        return self._handler is not None

    @property
    def channel(self) -> str | None:
        return self._handler.channel if self._handler else None

    def install(self, channel: str) -> None:
        """Start forwarding. No-op if already installed."""
        with self._lock:
            if self._handler is not None:
                return

            root = logging.getLogger()
            self._saved_root = _SavedLogger(handlers=list(root.handlers), propagate=root.propagate)
            self._saved_root_level = root.level
            for handler in self._saved_root.handlers:
                root.removeHandler(handler)

            # Loggers created later start without handlers and propagate to root
            for name, existing in list(logging.Logger.manager.loggerDict.items()):
                if not isinstance(existing, logging.Logger):
                    continue
                self._saved_loggers[name] = _SavedLogger(
                    handlers=list(existing.handlers), propagate=existing.propagate
                )
                for handler in list(existing.handlers):
                    existing.removeHandler(handler)
                existing.propagate = True

            perf = logging.getLogger(PERF_LOGGER)
            self._saved_perf_disabled = perf.disabled
            perf.disabled = True

            self._handler = _ForwardingHandler(channel, self.sink)
            root.addHandler(self._handler)
            root.setLevel(logging.NOTSET)

        logger.debug(f"Installed log bridge on channel '{channel}'")

    def uninstall(self) -> None:
        """Stop forwarding, flush and restore the previous logging configuration."""
        with self._lock:
            handler = self._handler
            if handler is None:
                return

            root = logging.getLogger()
            root.removeHandler(handler)
            handler.flush()
            handler.close()

            if self._saved_root is not None:
                for saved in self._saved_root.handlers:
                    root.addHandler(saved)
            root.setLevel(self._saved_root_level)

            for name, saved_logger in self._saved_loggers.items():
                existing = logging.getLogger(name)
                for saved in saved_logger.handlers:
                    existing.addHandler(saved)
                existing.propagate = saved_logger.propagate

            logging.getLogger(PERF_LOGGER).disabled = self._saved_perf_disabled

            self._handler = None
            self._saved_root = None
            self._saved_loggers = {}

        logger.debug("Uninstalled log bridge")


_bridge = LogBridge()


def get_bridge() -> LogBridge:
    """Process-wide bridge over the shared logging tree."""
    return _bridge


def install(channel: str) -> None:
    _bridge.install(channel)


def uninstall() -> None:
    _bridge.uninstall()
