from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; both accepted on input"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserBrief(CamelModel):
    """User summary embedded in other resources"""
    id: int
    name: str
    email: str
    initials: Optional[str] = None
    avatar: Optional[str] = None


class ProjectBrief(CamelModel):
    id: int
    name: str


class TaskBrief(CamelModel):
    id: str
    title: str
