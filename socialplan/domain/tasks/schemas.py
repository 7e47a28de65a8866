"""Task domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...shared.validators import validate_time, validate_time_range, validate_weekday


class Task(BaseModel):
    """One scheduled block on a weekday"""

    id: str = Field(..., min_length=1, max_length=64)
    day: str
    start_time: str
    end_time: str
    description: str = Field(..., min_length=1, max_length=200)

    @field_validator("day")
    @classmethod
    def validate_day(cls, v: str) -> str:
        return validate_weekday(v)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v: str) -> str:
        return validate_time(v)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description cannot be empty")
        return v

    @model_validator(mode="after")
    def check_window(self):
        validate_time_range(self.start_time, self.end_time)
        return self


class TaskListUpdate(BaseModel):
    """Full replacement of the user's task array"""

    tasks: list[Task]

    @field_validator("tasks")
    @classmethod
    def unique_ids(cls, v: list[Task]) -> list[Task]:
        seen = set()
        for task in v:
            if task.id in seen:
                raise ValueError(f"Duplicate task id {task.id}")
            seen.add(task.id)
        return v


class TaskDocument(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    tasks: list[Task]
    updated_at: Optional[datetime] = None
