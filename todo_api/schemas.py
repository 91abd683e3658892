from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TaskItemBase(BaseModel):
    # camelCase on the wire (assignedUser, createdDate), snake_case accepted too
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    assigned_user: Optional[str] = None


class TaskItemCreate(TaskItemBase):
    """Body of POST; a caller supplied id is dropped"""
    created_date: Optional[datetime] = None


class TaskItemUpdate(TaskItemCreate):
    """Body of PUT; created_date is accepted but never applied"""
    pass


class TaskItemResponse(TaskItemBase):
    id: int
    created_date: datetime
