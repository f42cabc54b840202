"""Assignment API schemas."""

from pydantic import BaseModel, Field


class ResolveAssignmentRequest(BaseModel):
    """Body of POST /assignments/resolve. Neither person nor group resolves to unassigned."""

    person: str | None = None
    group: str | None = None
    strategy: str | None = Field(default=None, description="Override the group's strategy")


class ResolvedAssignmentResponse(BaseModel):
    """Who the task would go to."""

    person_id: str | None = None
    group_id: str | None = None
    strategy: str
    unassigned: bool = False
