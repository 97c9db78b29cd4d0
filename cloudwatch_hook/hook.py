"""Dispatch hook that appends log entries to a CloudWatch Logs stream."""

import functools
import logging
import threading
import time
from typing import Callable, Iterable

from cloudwatch_hook.client import LogsClient, new_logs_client
from cloudwatch_hook.config import Config
from cloudwatch_hook.entry_queue import EntryQueue, shared_queue
from cloudwatch_hook.errors import DispatchError, InitializationError
from cloudwatch_hook.levels import ALL_LEVELS, Level, level_threshold
from cloudwatch_hook.models import LogEntry

logger = logging.getLogger(__name__)

Hook = Callable[[LogEntry], None]


class CloudwatchHook:
    """Ships each accepted log event to one CloudWatch log stream.

    ``get_hook()`` sets up the group and stream and returns the per-event
    callback to register with the logging pipeline. In async mode each
    append runs on its own daemon thread and failures are dropped silently;
    there is no timeout, so an append that never returns leaks its thread.
    Synchronous and async appends share one lock so the sequence token is
    read and replaced atomically.
    """

    def __init__(
        self,
        group_name: str,
        stream_name: str,
        is_async: bool = False,
        client_factory: Callable[[], LogsClient] = new_logs_client,
        level: Level | None = None,
        accepted_levels: Iterable[Level] | None = None,
        queue: EntryQueue | None = None,
        match_entry_ids: bool = True,
    ):
        self.group_name = group_name
        self.stream_name = stream_name
        self.is_async = is_async
        if accepted_levels is not None:
            self.accepted_levels: list[Level] | None = list(accepted_levels)
        elif level is not None:
            self.accepted_levels = level_threshold(level)
        else:
            self.accepted_levels = None
        self._client_factory = client_factory
        self._queue = queue if queue is not None else shared_queue
        self._match_entry_ids = match_entry_ids
        self._client: LogsClient | None = None
        self._next_sequence_token: str | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: Config, client_factory: Callable[[], LogsClient] | None = None,
                    queue: EntryQueue | None = None) -> "CloudwatchHook":
        if client_factory is None:
            client_factory = functools.partial(
                new_logs_client,
                region=config.region,
                endpoint_url=config.endpoint_url,
                profile=config.profile,
            )
        return cls(
            config.group_name,
            config.stream_name,
            is_async=config.is_async,
            client_factory=client_factory,
            level=config.level,
            accepted_levels=config.accepted_levels or None,
            queue=queue,
            match_entry_ids=config.match_entry_ids,
        )

    @property
    def queue(self) -> EntryQueue:
        return self._queue

    @property
    def next_sequence_token(self) -> str | None:
        with self._lock:
            return self._next_sequence_token

    def levels(self) -> list[Level]:
        """Levels sent to CloudWatch; all of them when none were configured."""
        if self.accepted_levels is None:
            return list(ALL_LEVELS)
        return self.accepted_levels

    def is_accepted_level(self, level: Level) -> bool:
        return level in self.levels()

    def get_hook(self) -> Hook:
        """Open the client, ensure the group and stream exist, and return the callback."""
        try:
            self._client = self._client_factory()
            self._ensure_group()
            token = self._find_stream_token()
        except Exception as e:
            raise InitializationError(
                f"Failed to set up {self.group_name}/{self.stream_name}: {e}"
            ) from e

        with self._lock:
            self._next_sequence_token = token
        return self._write

    def _ensure_group(self):
        resp = self._client.describe_log_groups(logGroupNamePrefix=self.group_name, limit=1)
        # Groups are listed by name, so an exact match sorts first for its own prefix.
        groups = resp.get("logGroups", [])
        if groups and groups[0].get("logGroupName") == self.group_name:
            return
        self._client.create_log_group(logGroupName=self.group_name)
        logger.info("Created log group %s", self.group_name)

    def _find_stream_token(self) -> str | None:
        resp = self._client.describe_log_streams(
            logGroupName=self.group_name,
            logStreamNamePrefix=self.stream_name,
        )
        for stream in resp.get("logStreams", []):
            if stream.get("logStreamName") == self.stream_name:
                token = stream.get("uploadSequenceToken")
                logger.debug("Found log stream %s/%s, sequence token=%s",
                             self.group_name, self.stream_name, token)
                return token

        self._client.create_log_stream(logGroupName=self.group_name, logStreamName=self.stream_name)
        logger.info("Created log stream %s/%s", self.group_name, self.stream_name)
        return None

    def _write(self, entry: LogEntry):
        if not self.is_accepted_level(entry.level):
            return

        if self._match_entry_ids:
            enriched = self._queue.take(entry.entry_id)
        else:
            enriched = self._queue.pop()
        if enriched is not None:
            entry = enriched

        message = f"[{entry.logger_name}] {entry.message}"
        if entry.stack:
            message = f"{message}\n{entry.stack}"
        event = {
            "message": message,
            "timestamp": int(time.time() * 1000),
        }

        if self.is_async:
            threading.Thread(target=self._send_detached, args=(event,), daemon=True).start()
            return

        self._send_event(event)

    def _send_detached(self, event: dict):
        try:
            self._send_event(event)
        except DispatchError:
            pass

    def _send_event(self, event: dict):
        """Append one event under the lock and record the returned sequence token."""
        if self._client is None:
            raise DispatchError("get_hook() has not been called")

        # The token is read inside the lock so concurrent appends each see the latest one.
        with self._lock:
            params = {
                "logGroupName": self.group_name,
                "logStreamName": self.stream_name,
                "logEvents": [event],
            }
            # boto3 rejects an explicit None, so a fresh stream omits the token
            if self._next_sequence_token is not None:
                params["sequenceToken"] = self._next_sequence_token
            try:
                resp = self._client.put_log_events(**params)
            except Exception as e:
                raise DispatchError(f"put_log_events to {self.group_name}/{self.stream_name} failed: {e}") from e
            self._next_sequence_token = resp.get("nextSequenceToken")
