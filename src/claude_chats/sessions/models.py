"""Session data models."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Session(BaseModel):
    """One chat session as listed in the manager."""

    uuid: str = Field(description="Session id, the record file name without extension")
    title: str
    timestamp: str = Field(description="File modification time, YYYY-MM-DD HH:MM:SS")
    project: str = Field(description="Name of the owning project directory")
    version: str = ""
    record_count: int = 0
    path: Path


class RecordMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # Plain prompts are strings; tool results and rich prompts are lists of blocks.
    content: str | list[Any] | None = None


class SessionRecord(BaseModel):
    """The fields of a session record line that the manager reads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str = ""
    version: str = ""
    slug: str = ""
    is_meta: bool = Field(default=False, alias="isMeta")
    summary: str = ""
    message: RecordMessage | None = None

    @field_validator("type", "version", "slug", "summary", "is_meta", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @property
    def text_content(self) -> str | None:
        if self.message is None or not isinstance(self.message.content, str):
            return None
        return self.message.content


class SessionIndexEntry(BaseModel):
    """A manifest entry. Keys not declared here are kept as-is on rewrite."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    session_id: str | None = Field(default="", alias="sessionId")
    full_path: str | None = Field(default="", alias="fullPath")
    file_mtime: int | float | None = Field(default=0, alias="fileMtime")
    first_prompt: str | None = Field(default="", alias="firstPrompt")
    summary: str | None = ""
    message_count: int | None = Field(default=0, alias="messageCount")
    created: str | None = ""
    modified: str | None = ""
    git_branch: str | None = Field(default="", alias="gitBranch")
    project_path: str | None = Field(default="", alias="projectPath")
    is_sidechain: bool | None = Field(default=False, alias="isSidechain")


class SessionIndex(BaseModel):
    """A project's sessions-index.json manifest."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    version: int = 0
    entries: list[SessionIndexEntry] = Field(default_factory=list)
    original_path: str | None = Field(default="", alias="originalPath")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_unset=True, indent=2)
