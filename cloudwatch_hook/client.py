"""CloudWatch Logs client construction and the client surface the hook relies on."""

import logging
from typing import Any, Protocol

import boto3

logger = logging.getLogger(__name__)


class LogsClient(Protocol):
    """The subset of the boto3 ``logs`` client used by the hook."""

    def create_log_group(self, **kwargs: Any) -> dict:
        ...

    def describe_log_groups(self, **kwargs: Any) -> dict:
        ...

    def describe_log_streams(self, **kwargs: Any) -> dict:
        ...

    def create_log_stream(self, **kwargs: Any) -> dict:
        ...

    def put_log_events(self, **kwargs: Any) -> dict:
        ...


def new_logs_client(region: str | None = None, endpoint_url: str | None = None,
                    profile: str | None = None) -> LogsClient:
    """Open a boto3 session and return a CloudWatch Logs client.

    Credentials are resolved the usual boto3 way (environment, shared
    config, instance role) unless *profile* names one explicitly.
    """
    session = boto3.session.Session(region_name=region, profile_name=profile)
    logger.debug("Opening CloudWatch Logs client (region=%s, endpoint=%s)",
                 session.region_name, endpoint_url)
    return session.client("logs", endpoint_url=endpoint_url)
