"""Shared types and enumerations."""

from __future__ import annotations

from enum import StrEnum


class DataSource(StrEnum):
    LIVE_WEBHOOK = "live-webhook"
    LIVE_API = "live-api"
    LIVE_ENGINE = "live-engine"  # workflow management API (status/toggle only)
    SIMULATION = "simulation"
    MOCK = "mock"
    ERROR = "error"


class Tier(StrEnum):
    LOCAL_API = "local_api"
    WORKFLOW_ENGINE = "workflow_engine"
    MOCK = "mock"


class MessageType(StrEnum):
    GREETING = "greeting"
    SMALL_TALK = "small_talk"
    PRODUCT_INQUIRY = "product_inquiry"
    QUESTION = "question"
    FOLLOW_UP = "follow_up"


class Domain(StrEnum):
    WEBSITES = "websites"
    PORTFOLIOS = "portfolios"
    PROJECTS = "projects"
    CUSTOM_PROJECTS = "custom_projects"


class MessageStatus(StrEnum):
    RECEIVED = "received"
    PROCESSING = "processing"
    REPLIED = "replied"
    FAILED = "failed"


class ExecutionStatus(StrEnum):
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"
    WAITING = "waiting"
