from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .course import Reference


class Module(BaseModel):
    id: int = Field(gt=0)
    title: str
    # Absent until the first lesson is assigned
    lessons: Optional[List[Reference]] = Field(default=None, description="Ordered references to lessons")

    model_config = ConfigDict(extra="allow")

    def references_lesson(self, lesson_id: int) -> bool:
        return any(ref.id == lesson_id for ref in self.lessons or [])
