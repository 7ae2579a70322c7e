"""
Lesson schema definition.

A lesson is a leaf entity: it holds no references of its own and is only
ever referenced by modules.
"""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ContentBlock(BaseModel):
    type: str = Field(description="Kind of block, e.g. text, video, code")
    data: str = Field(description="Block payload")


class Lesson(BaseModel):
    id: int = Field(gt=0)
    title: str
    description: str = ""
    topics: List[str] = Field(default_factory=list)
    content: List[ContentBlock] = Field(default_factory=list)

    # Fields written by other tools survive a whole-collection rewrite
    model_config = ConfigDict(extra="allow")
