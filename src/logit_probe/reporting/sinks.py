"""Destinations for rendered reports.

Each report is handed to a sink as one string and written as one unit, so
reports from concurrent callers never interleave line by line.

Sinks register via the ``@SinkRegistry.register()`` decorator; the
``build()`` class method instantiates the sink named by the config's
``sink`` field.
"""

from __future__ import annotations

import logging
import sys
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, TextIO

from logit_probe.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

_stream_lock = threading.Lock()


class ReportSink(ABC):
    """Abstract destination for report text."""

    @abstractmethod
    def write(self, text: str) -> None:
        """Emit one complete report.

        Args:
            text: The rendered report, including its trailing newline.
        """


class SinkRegistry:
    """Registry mapping string names to ReportSink factories."""

    _registry: ClassVar[dict[str, Callable[[], ReportSink]]] = {}

    @classmethod
    def register(
        cls, name: str
    ) -> Callable[[Callable[[], ReportSink]], Callable[[], ReportSink]]:
        """Decorator that registers a zero-argument sink factory under *name*.

        Args:
            name: Identifier used in config ``sink``.

        Returns:
            Decorator that registers the factory and returns it unchanged.

        Raises:
            ValueError: If *name* is already registered.
        """

        def decorator(factory: Callable[[], ReportSink]) -> Callable[[], ReportSink]:
            if name in cls._registry:
                raise ValueError(f"Sink '{name}' is already registered")
            cls._registry[name] = factory
            return factory

        return decorator

    @classmethod
    def get(cls, name: str) -> Callable[[], ReportSink]:
        """Return the sink factory registered under *name*.

        Raises:
            KeyError: If *name* is not registered.
        """
        if name not in cls._registry:
            available = ", ".join(sorted(cls._registry)) or "(none)"
            raise KeyError(f"Unknown report sink '{name}'. Available: {available}")
        return cls._registry[name]

    @classmethod
    def build(cls, config: Any) -> ReportSink:
        """Instantiate the sink specified by *config.sink*.

        Args:
            config: A LogitProbeConfig (or compatible object) with a
                ``sink`` attribute.

        Raises:
            ConfigValidationError: If the sink name is not registered.
        """
        try:
            factory = cls.get(config.sink)
        except KeyError as exc:
            raise ConfigValidationError(str(exc.args[0])) from exc
        return factory()

    @classmethod
    def list_registered(cls) -> list[str]:
        """Return sorted list of registered sink names."""
        return sorted(cls._registry)


class StreamSink(ReportSink):
    """Writes reports to a text stream.

    When *stream* is ``None`` the sink resolves ``sys.stderr`` (or
    ``sys.stdout``) at write time, so redirection after construction
    (pytest's ``capsys``, for one) is honoured.

    Args:
        stream: Target stream, or ``None`` to follow the standard stream.
        use_stdout: With ``stream=None``, follow stdout instead of stderr.
    """

    def __init__(self, stream: TextIO | None = None, use_stdout: bool = False) -> None:
        self._stream = stream
        self._use_stdout = use_stdout

    @property
    def stream(self) -> TextIO:
        if self._stream is not None:
            return self._stream
        return sys.stdout if self._use_stdout else sys.stderr

    def write(self, text: str) -> None:
        stream = self.stream
        with _stream_lock:
            stream.write(text)
            stream.flush()


class LoggingSink(ReportSink):
    """Emits each report as a single log record.

    Args:
        logger_name: Logger to emit on.
        level: Log level of the records.
    """

    def __init__(self, logger_name: str = "logit_probe.report", level: int = logging.INFO) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def write(self, text: str) -> None:
        self._logger.log(self._level, "%s", text.rstrip("\n"))


@SinkRegistry.register("stderr")
def _stderr_sink() -> ReportSink:
    return StreamSink()


@SinkRegistry.register("stdout")
def _stdout_sink() -> ReportSink:
    return StreamSink(use_stdout=True)


@SinkRegistry.register("logging")
def _logging_sink() -> ReportSink:
    return LoggingSink()
