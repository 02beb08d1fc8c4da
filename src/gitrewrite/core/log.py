"""Logger with composable output sinks, backed by logfire."""

from __future__ import annotations

import contextlib
from abc import abstractmethod
from pathlib import Path
from typing import Any

from opentelemetry.proto.logs.v1 import logs_pb2
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult
from pydantic import Field, PrivateAttr, model_validator

from gitrewrite.core.base import BaseConfig

_current_logger: Logger | None = None


class _LoggerProxy:
    """Forwards attribute access to the current Logger.

    Before setup_logger() has run, every call is a no-op and span()
    yields a null context, so library code can log unconditionally.
    """

    def __getattr__(self, name):
        if _current_logger is None:
            if name == "span":
                return lambda *args, **kwargs: contextlib.nullcontext()

            def _noop(*args, **kwargs):  # noqa: ARG001
                pass
            return _noop
        return getattr(_current_logger, name)

    def __enter__(self):
        if _current_logger is None:
            return self
        return _current_logger.__enter__()

    def __exit__(self, *args):
        if _current_logger is None:
            return False
        return _current_logger.__exit__(*args)


logger = _LoggerProxy()


# Level name -> OpenTelemetry severity number
LEVELS = {
    'trace': logs_pb2.SEVERITY_NUMBER_TRACE,
    'debug': logs_pb2.SEVERITY_NUMBER_DEBUG,
    'info': logs_pb2.SEVERITY_NUMBER_INFO,
    'warn': logs_pb2.SEVERITY_NUMBER_WARN,
    'error': logs_pb2.SEVERITY_NUMBER_ERROR,
    'fatal': logs_pb2.SEVERITY_NUMBER_FATAL,
}


# span attributes that are instrumentation detail, not user data
_SKIP_PREFIXES = ('otel.', 'telemetry.', 'service.', 'process.')
_SKIP_KEYS = frozenset({
    'code.filepath', 'code.lineno', 'code.function',
    'logfire.msg', 'logfire.level_num', 'logfire.span_type',
    'logfire.msg_template', 'logfire.json_schema',
})


def level_name(level_num: int) -> str:
    """Map a severity number back to the closest level name."""
    for name in ('fatal', 'error', 'warn', 'info', 'debug', 'trace'):
        if level_num >= LEVELS[name]:
            return name
    return 'trace'


class LevelFilteringExporter(SpanExporter):
    """Forward only spans at or above a minimum level."""

    def __init__(self, exporter: SpanExporter, min_level: str | None):
        self._exporter = exporter
        self._min_severity = LEVELS.get(
            (min_level or 'info').lower(), LEVELS['info']
        )

    def export(self, spans: list[ReadableSpan]) -> SpanExportResult:
        kept = [
            span for span in spans
            if (span.attributes or {}).get(
                'logfire.level_num', LEVELS['info']
            ) >= self._min_severity
        ]
        if kept:
            return self._exporter.export(kept)
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        self._exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._exporter.force_flush(timeout_millis)


class Sink(BaseConfig):
    """One independent log destination.

    Sinks are closed through the BaseCloseable cascade when the
    owning Logger closes.
    """

    enabled: bool = Field(default=True, description="Enable this sink")
    level: str | None = Field(
        default=None,
        description=(
            "Minimum level for this sink; inherits Logger.level when "
            "unset. One of trace, debug, info, warn, error, fatal"
        ),
    )
    format_template: str = Field(
        default="{timestamp:%Y-%m-%d %H:%M:%S} {level:<5} {message}",
        description=(
            "Line template. Fields: timestamp, level, message, "
            "location, function"
        ),
    )

    _processor: Any = PrivateAttr(default=None)

    def _format_span(self, span) -> str:
        from datetime import UTC, datetime

        attrs = dict(span.attributes or {})
        filepath = attrs.get("code.filepath", "")
        data = {
            'timestamp': datetime.fromtimestamp(
                span.start_time / 1e9, tz=UTC
            ),
            'level': level_name(
                attrs.get('logfire.level_num', LEVELS['info'])
            ),
            'message': attrs.get("logfire.msg", span.name),
            'location': (
                f"{filepath}:{attrs.get('code.lineno', '')}"
                if filepath else ""
            ),
            'function': attrs.get("code.function", ""),
        }
        try:
            line = self.format_template.format(**data)
        except KeyError as e:
            return f"ERROR: Invalid template field {e}\n"

        # user-supplied keyword attributes go after the message
        extra = {
            key: value for key, value in attrs.items()
            if key not in _SKIP_KEYS
            and not key.startswith(_SKIP_PREFIXES)
        }
        if extra:
            line += " │ " + ' '.join(
                f"{k}={v!r}" for k, v in sorted(extra.items())
            )
        return line + '\n'

    @abstractmethod
    def create_processor(self, log_root: Path, repo_name: str):
        """Return an OpenTelemetry span processor, or None."""

    def close(self):
        if self._processor:
            with contextlib.suppress(Exception):
                self._processor.shutdown()


class ConsoleSink(Sink):
    """Terminal output, rendered by logfire itself."""

    verbose: bool = Field(default=False, description="Show span details")
    colors: str = Field(
        default="auto", description="Color mode: auto, always, never"
    )

    def create_processor(self, log_root: Path, repo_name: str):
        return None


class FileSink(Sink):
    """Append formatted lines to a log file."""

    enabled: bool = Field(default=False, description="Enable file logging")
    path: str = Field(
        default="{log_root}/{repo_name}/gitrewrite.log",
        description="Log file path template",
    )

    _file: Any = PrivateAttr(default=None)

    def create_processor(self, log_root: Path, repo_name: str):
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
        )

        log_path = Path(
            self.path.format(log_root=log_root, repo_name=repo_name)
        )
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # line buffered; stays open for the lifetime of the sink
        self._file = open(log_path, "a", buffering=1, encoding="utf-8")  # noqa: SIM115

        exporter = ConsoleSpanExporter(
            out=self._file, formatter=self._format_span
        )
        return BatchSpanProcessor(
            LevelFilteringExporter(exporter, self.level)
        )

    def close(self):
        # processor first so pending spans reach the file
        super().close()
        if self._file and not self._file.closed:
            with contextlib.suppress(Exception):
                self._file.flush()
                self._file.close()


class LogfireSink(Sink):
    """logfire.dev cloud export."""

    enabled: bool = Field(
        default=False, description="Send telemetry to logfire.dev"
    )
    token: str | None = Field(
        default=None, description="API token (or LOGFIRE_TOKEN)"
    )

    def create_processor(self, log_root: Path, repo_name: str):
        return None


class Logger(BaseConfig):
    """Logger configuration plus the live logging methods.

    close() cascades into every sink through BaseCloseable.
    """

    level: str = Field(
        default="info",
        description="Default level for sinks that do not set their own",
    )
    console: ConsoleSink = Field(default_factory=ConsoleSink)
    file: FileSink = Field(default_factory=FileSink)
    logfire: LogfireSink = Field(default_factory=LogfireSink)

    @model_validator(mode='after')
    def _cascade_level_to_sinks(self) -> 'Logger':
        for sink in (self.console, self.file):
            if sink.level is None:
                sink.level = self.level
        return self

    def setup(self, log_root: Path, repo_name: str):
        """Create sink processors and configure logfire."""
        import logfire
        from logfire import ConsoleOptions

        for sink in (self.console, self.file, self.logfire):
            if sink.enabled:
                sink._processor = sink.create_processor(log_root, repo_name)

        processors = [
            self.file._processor
        ] if self.file.enabled and self.file._processor else None

        console = (
            ConsoleOptions(
                min_log_level=self.console.level,
                verbose=self.console.verbose,
                colors=self.console.colors,
                include_timestamps=True,
            )
            if self.console.enabled
            else False
        )

        logfire.configure(
            service_name=f"gitrewrite-{repo_name}",
            send_to_logfire=self.logfire.enabled,
            token=self.logfire.token if self.logfire.enabled else None,
            console=console,
            additional_span_processors=processors,
        )

    def trace(self, msg: str, **kwargs):
        import logfire
        logfire.trace(msg, **kwargs)

    def debug(self, msg: str, **kwargs):
        import logfire
        logfire.debug(msg, **kwargs)

    def info(self, msg: str, **kwargs):
        import logfire
        logfire.info(msg, **kwargs)

    def warn(self, msg: str, **kwargs):
        import logfire
        logfire.warn(msg, **kwargs)

    def error(self, msg: str, **kwargs):
        import logfire
        logfire.error(msg, **kwargs)

    def span(self, msg: str, **kwargs):
        """Span context manager around a unit of work."""
        import logfire
        return logfire.span(msg, **kwargs)


def setup_logger(
    log_root: Path,
    repo_name: str,
    console: ConsoleSink | None = None,
    file: FileSink | None = None,
    logfire: LogfireSink | None = None,
) -> Logger:
    """Initialize the global logger singleton.

    Config calls this once loading is finished; tests call it
    directly to get console-only output.
    """
    global _current_logger

    _current_logger = Logger(
        console=console or ConsoleSink(),
        file=file or FileSink(),
        logfire=logfire or LogfireSink(),
    )
    _current_logger.setup(log_root, repo_name)
    return _current_logger


def close_logger():
    """Close and forget the global logger."""
    global _current_logger
    if _current_logger is not None:
        _current_logger.close()
        _current_logger = None
