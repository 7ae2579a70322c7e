"""
Course schema definitions.

Design choices:
- Relationships are stored as bare `Reference` objects (`{"id": n}`) and resolved at read time;
  a course never embeds a copy of its modules on disk.
- `modules` is optional so documents written without it stay that way after a rewrite.
- `ExpandedCourse` / `ExpandedModule` are read-only projections produced by CourseStore.list_expanded().
"""
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .lesson import Lesson


class Reference(BaseModel):
    id: int = Field(gt=0, description="ID of the referenced entity")


class Course(BaseModel):
    id: int = Field(gt=0)
    title: str
    description: str = ""
    modules: Optional[List[Reference]] = Field(default=None, description="Ordered references to modules")

    # Fields written by other tools survive a whole-collection rewrite
    model_config = ConfigDict(extra="allow")

    def references_module(self, module_id: int) -> bool:
        return any(ref.id == module_id for ref in self.modules or [])


class ExpandedModule(BaseModel):
    id: int
    title: str
    # Unresolved lesson references stay as bare references
    lessons: List[Union[Lesson, Reference]] = Field(default_factory=list)


class ExpandedCourse(BaseModel):
    id: int
    title: str
    description: str = ""
    # Unresolved module references stay as bare references
    modules: List[Union[ExpandedModule, Reference]] = Field(default_factory=list)
