"""Models shared by the intent and entity resolution steps."""

from enum import Enum

from pydantic import BaseModel, Field


class IntentTag(str, Enum):
    """Closed set of chat intents."""

    KIT_OVERVIEW = "KIT_OVERVIEW"
    COMPONENTS_LIST = "COMPONENTS_LIST"
    COMPONENT_INFO = "COMPONENT_INFO"
    LIST_PROJECTS = "LIST_PROJECTS"
    PROJECT_VIDEOS = "PROJECT_VIDEOS"
    GENERAL = "GENERAL"

    @property
    def is_deterministic(self) -> bool:
        """Whether the reply is built from the KB without the model."""
        return self in (
            IntentTag.KIT_OVERVIEW,
            IntentTag.COMPONENTS_LIST,
            IntentTag.LIST_PROJECTS,
            IntentTag.PROJECT_VIDEOS,
        )


class DetectedEntities(BaseModel):
    """Project and component referenced by a turn (or recovered from history)."""

    project: str | None = Field(default=None, description="Canonical project name")
    component: str | None = Field(default=None, description="Component id")

    @property
    def complete(self) -> bool:
        return self.project is not None and self.component is not None
