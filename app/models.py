from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def get_utc_now():
    """Helper function to get current UTC time with timezone"""
    return datetime.now(timezone.utc)


class TaskBase(BaseModel):
    """Base model with shared fields"""

    title: str | None = Field(default=None)
    completed: bool = Field(default=False)


class TaskCreate(TaskBase):
    """Schema for creating a task"""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @field_validator("title", mode="before")
    def boolean_title_to_str(cls, v: Any):
        if isinstance(v, bool):
            return "true" if v else "false"
        return v

    def to_document(self) -> dict[str, Any]:
        return {"title": self.title, "completed": self.completed}


class TaskResponse(BaseModel):
    """Schema for task responses"""

    id: str
    title: str | None = None
    completed: bool | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "TaskResponse":
        return cls(
            id=str(document["_id"]),
            title=document.get("title"),
            completed=document.get("completed"),
            created_at=document.get("createdAt"),
        )
