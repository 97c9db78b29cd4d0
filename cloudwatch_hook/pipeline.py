"""Bridges the stdlib logging package onto cores and dispatch hooks."""

import datetime
import logging
from collections.abc import Mapping
from typing import Callable, Iterable, Sequence

from cloudwatch_hook.client import LogsClient
from cloudwatch_hook.config import Config
from cloudwatch_hook.core import Core, EnrichingCore
from cloudwatch_hook.entry_queue import EntryQueue
from cloudwatch_hook.hook import CloudwatchHook, Hook
from cloudwatch_hook.levels import Level, from_logging_level, to_logging_level
from cloudwatch_hook.models import Field, LogEntry, fields_from_mapping

# Loggers whose records must never be shipped: the hook's own, and the AWS
# client stack it calls while appending.
INTERNAL_LOGGERS = ("cloudwatch_hook", "botocore", "boto3", "urllib3", "s3transfer")

_exc_formatter = logging.Formatter()


def entry_from_record(record: logging.LogRecord) -> LogEntry:
    stack = _exc_formatter.formatException(record.exc_info) if record.exc_info else ""
    return LogEntry(
        level=from_logging_level(record.levelno),
        logger_name=record.name,
        message=record.getMessage(),
        stack=stack,
        timestamp=datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc),
    )


def fields_from_record(record: logging.LogRecord) -> list[Field]:
    """Read fields passed as ``extra={"fields": ...}`` (a mapping or a list of Field)."""
    fields = getattr(record, "fields", None)
    if fields is None:
        return []
    if isinstance(fields, Mapping):
        return fields_from_mapping(fields)
    return list(fields)


class InternalLoggerFilter(logging.Filter):
    def __init__(self, prefixes: Iterable[str] = INTERNAL_LOGGERS):
        super().__init__()
        self._prefixes = tuple(prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        return not any(name == p or name.startswith(p + ".") for p in self._prefixes)


class HandlerCore:
    """Terminal core that hands entries to an ordinary logging handler."""

    def __init__(self, handler: logging.Handler):
        self._handler = handler

    @property
    def handler(self) -> logging.Handler:
        return self._handler

    def enabled(self, level: Level) -> bool:
        return to_logging_level(level) >= self._handler.level

    def write(self, entry: LogEntry, fields: Sequence[Field]):
        if not self.enabled(entry.level):
            return
        created = entry.timestamp.timestamp()
        record = logging.makeLogRecord({
            "name": entry.logger_name,
            "levelno": to_logging_level(entry.level),
            "levelname": logging.getLevelName(to_logging_level(entry.level)),
            "msg": entry.message,
            "created": created,
            "msecs": (created - int(created)) * 1000,
            "entry_id": entry.entry_id,
            "exc_text": entry.stack or None,
        })
        self._handler.handle(record)


class NullCore:
    """Terminal core for pipelines that produce no in-process output."""

    def enabled(self, level: Level) -> bool:
        return False

    def write(self, entry: LogEntry, fields: Sequence[Field]):
        pass


class ShippingHandler(logging.Handler):
    """Runs each record through a core chain, then through every registered hook.

    Hooks receive the raw entry; a failing core does not stop them, and every
    error is reported through ``handleError``.
    """

    def __init__(self, core: Core, hooks: Iterable[Hook] = (), level=logging.NOTSET):
        super().__init__(level)
        self._core = core
        self._hooks: list[Hook] = list(hooks)
        self.addFilter(InternalLoggerFilter())

    def add_hook(self, hook: Hook):
        self._hooks.append(hook)

    def emit(self, record: logging.LogRecord):
        try:
            entry = entry_from_record(record)
            fields = fields_from_record(record)
        except Exception:
            self.handleError(record)
            return

        try:
            self._write_core(entry, fields)
        except Exception:
            self.handleError(record)

        for hook in self._hooks:
            try:
                hook(entry)
            except Exception:
                self.handleError(record)

    def _write_core(self, entry: LogEntry, fields: Sequence[Field]):
        if self._core.enabled(entry.level):
            self._core.write(entry, fields)


def install(
    config: Config,
    logger: logging.Logger | None = None,
    next_handler: logging.Handler | None = None,
    client_factory: Callable[[], LogsClient] | None = None,
    queue: EntryQueue | None = None,
) -> ShippingHandler:
    """Set up the CloudWatch hook and attach a shipping handler to *logger*.

    Raises InitializationError if the group or stream cannot be set up; in
    that case nothing is attached.
    """
    hook = CloudwatchHook.from_config(config, client_factory=client_factory, queue=queue)
    callback = hook.get_hook()

    if next_handler is None and config.console:
        next_handler = logging.StreamHandler()
        next_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s — %(message)s")
        )
    next_core = HandlerCore(next_handler) if next_handler is not None else NullCore()

    # Only enrich what the hook will take off the queue again.
    core = EnrichingCore(next_core, queue=hook.queue, levels=hook.levels())
    handler = ShippingHandler(core, hooks=[callback])

    target = logger if logger is not None else logging.getLogger()
    target.addHandler(handler)
    logging.getLogger(__name__).info(
        "Shipping %s to CloudWatch %s/%s (async=%s)",
        target.name, config.group_name, config.stream_name, config.is_async,
    )
    return handler
