from typing import Optional
from pydantic import BaseModel, Field

from habitflow.schemas.habit import HabitSummaryResponse


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    color: Optional[str] = Field(default=None, max_length=16, examples=["#7CB342"])


class CategoryResponse(BaseModel):
    id: int
    name: str
    color: Optional[str]
    position: int
    habits: list[HabitSummaryResponse] = Field(default_factory=list)
