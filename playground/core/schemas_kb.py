"""Pydantic models for the knowledge indexes built from the KB document."""

from enum import Enum

from pydantic import BaseModel, Field


class SupportReason(str, Enum):
    """Failure patterns that route a chat turn to human support."""

    USER_REQUESTED_SUPPORT = "USER_REQUESTED_SUPPORT"
    PART_MISSING = "PART_MISSING"
    HARDWARE_DAMAGED = "HARDWARE_DAMAGED"
    UNKNOWN_COMPONENT = "UNKNOWN_COMPONENT"
    PROJECT_NOT_IN_KB = "PROJECT_NOT_IN_KB"


class Lesson(BaseModel):
    """A single lesson entry for a project."""

    name: str = Field(..., description="Display name")
    videos: list[str] = Field(default_factory=list, description="Video links, ordered and unique")
    explanation: str | None = Field(default=None, description="Short explanation of the lesson")


class ComponentInfo(BaseModel):
    """A kit component as known to the KB."""

    name: str
    description: str = ""
    category: str | None = None


class SupportConfig(BaseModel):
    """Support-escalation block read from the KB."""

    enabled: bool = False
    triggers: set[SupportReason] = Field(default_factory=set)
    email: str | None = None
    phone: str | None = None
    hours: str | None = None


class KnowledgeIndexes(BaseModel):
    """
    Lookup structures derived from one KB snapshot.

    Built once per request and treated as read-only afterwards.
    """

    project_names: list[str] = Field(default_factory=list)
    # Keys are exactly project_names; missing content is an empty string
    project_blocks: dict[str, str] = Field(default_factory=dict)
    # Each list sorted by topical rank
    lesson_index: dict[str, list[Lesson]] = Field(default_factory=dict)
    pin_text: str = ""
    safety_text: str = ""
    component_index: dict[str, ComponentInfo] = Field(default_factory=dict)
    support_config: SupportConfig = Field(default_factory=SupportConfig)
    kit_overview: str = ""
