from typing import List, Optional, Tuple
from pydantic import BaseModel, Field

class StartRequest(BaseModel):
    """Battle start request schema."""
    seed: Optional[int] = None  # None = configured default seed
    points: Optional[int] = Field(default=None, ge=0)  # None = configured budget

class PathRequest(BaseModel):
    """Path query schema."""
    start: Tuple[int, int]
    goal: Tuple[int, int]
    blocked: List[Tuple[int, int]] = Field(default_factory=list)
    margin: Optional[int] = Field(default=None, ge=0)  # None = search the whole grid
    jump: bool = True

class PathResponse(BaseModel):
    """Path query response schema."""
    path: List[Tuple[int, int]]
    steps: int  # -1 when no path exists

class EventsResponse(BaseModel):
    """Events response schema."""
    next_offset: int
    events: list[dict]
