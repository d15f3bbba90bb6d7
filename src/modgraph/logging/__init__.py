"""Structured logging utilities."""

from .build_log import BuildEvent, JsonlBuildLogger, failure_event, success_event, utc_timestamp

__all__ = ["BuildEvent", "JsonlBuildLogger", "failure_event", "success_event", "utc_timestamp"]
