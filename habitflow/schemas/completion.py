"""
Completion ledger schemas.

POST /habits/{id}/completions/increment → CompletionResponse
POST /habits/{id}/completions/decrement → CompletionResponse
"""
from pydantic import BaseModel, Field


class CompletionResponse(BaseModel):
    day: str
    count: int = Field(ge=0, description="Completions recorded for the day after the change.")
    streak: int = Field(ge=0, description="Current streak, grace rule applied.")
    health: float = Field(ge=0, le=100)
    health_state: str = Field(description='"thriving" | "steady" | "at_risk"')
