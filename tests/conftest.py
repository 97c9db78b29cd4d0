"""Shared pytest fixtures — an in-memory CloudWatch Logs fake and isolated queues."""

import pytest

from cloudwatch_hook.entry_queue import EntryQueue


class FakeServiceError(Exception):
    pass


class FakeLogsClient:
    """Mimics the boto3 logs client, including the sequence-token contract."""

    def __init__(self):
        self.groups: dict[str, dict[str, str | None]] = {}
        self.put_calls: list[dict] = []
        self.events: list[dict] = []
        self.created_groups: list[str] = []
        self.created_streams: list[tuple[str, str]] = []
        self.fail_next_put = False
        self.fail_describe = False
        self._token_counter = 0

    def create_log_group(self, **kwargs):
        name = kwargs["logGroupName"]
        if name in self.groups:
            raise FakeServiceError(f"ResourceAlreadyExistsException: {name}")
        self.groups[name] = {}
        self.created_groups.append(name)
        return {}

    def describe_log_groups(self, **kwargs):
        if self.fail_describe:
            raise FakeServiceError("AccessDeniedException")
        prefix = kwargs.get("logGroupNamePrefix", "")
        names = sorted(n for n in self.groups if n.startswith(prefix))
        limit = kwargs.get("limit")
        if limit is not None:
            names = names[:limit]
        return {"logGroups": [{"logGroupName": n} for n in names]}

    def describe_log_streams(self, **kwargs):
        group = kwargs["logGroupName"]
        if group not in self.groups:
            raise FakeServiceError(f"ResourceNotFoundException: {group}")
        prefix = kwargs.get("logStreamNamePrefix", "")
        streams = []
        for name in sorted(self.groups[group]):
            if name.startswith(prefix):
                stream = {"logStreamName": name}
                token = self.groups[group][name]
                if token is not None:
                    stream["uploadSequenceToken"] = token
                streams.append(stream)
        return {"logStreams": streams}

    def create_log_stream(self, **kwargs):
        group, name = kwargs["logGroupName"], kwargs["logStreamName"]
        if name in self.groups[group]:
            raise FakeServiceError(f"ResourceAlreadyExistsException: {name}")
        self.groups[group][name] = None
        self.created_streams.append((group, name))
        return {}

    def put_log_events(self, **kwargs):
        self.put_calls.append(kwargs)
        if self.fail_next_put:
            self.fail_next_put = False
            raise FakeServiceError("ServiceUnavailableException")
        group, stream = kwargs["logGroupName"], kwargs["logStreamName"]
        expected = self.groups[group][stream]
        if kwargs.get("sequenceToken") != expected:
            raise FakeServiceError(
                f"InvalidSequenceTokenException: expected {expected}"
            )
        self._token_counter += 1
        token = f"token-{self._token_counter}"
        self.groups[group][stream] = token
        self.events.extend(kwargs["logEvents"])
        return {"nextSequenceToken": token}


@pytest.fixture()
def fake_client() -> FakeLogsClient:
    return FakeLogsClient()


@pytest.fixture()
def entry_queue() -> EntryQueue:
    return EntryQueue()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the caller's AWS and shipper settings out of config tests."""
    for name in (
        "CLOUDWATCH_GROUP", "CLOUDWATCH_STREAM", "LOG_LEVEL", "ACCEPTED_LEVELS",
        "ASYNC", "AWS_REGION", "CLOUDWATCH_ENDPOINT", "AWS_PROFILE",
        "MATCH_ENTRY_IDS", "CONSOLE", "LOG_FILE", "CONFIG_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
