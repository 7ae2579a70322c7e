"""
API contract schemas for versioned endpoints.

Notes:
- Request bodies carry the length limits; the stores themselves accept any string.
- Update bodies make every field optional so clients can send partial updates.
- ApiResponse is a generic wrapper model so different endpoints can return consistent envelopes while varying `data` types.
"""
from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

from .course import Course, Reference
from .lesson import ContentBlock, Lesson
from .module import Module


def _strip_required(v: str) -> str:
    cleaned = v.strip()
    if not cleaned:
        raise ValueError("Value cannot be empty")
    return cleaned


class CourseCreateRequest(BaseModel):
    title: str = Field(description="Course title", min_length=3, max_length=100)
    description: str = Field(description="Short course description", min_length=10, max_length=500)

    @field_validator("title", "description")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _strip_required(v)


class CourseBatchRequest(BaseModel):
    courses: List[CourseCreateRequest] = Field(min_length=1, max_length=100)


class CourseUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=500)
    modules: Optional[List[Reference]] = Field(default=None, description="Replaces the module reference list")


class ModuleCreateRequest(BaseModel):
    title: str = Field(description="Module title", min_length=3, max_length=100)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _strip_required(v)


class ModuleUpdateRequest(BaseModel):
    title: str = Field(description="Module title", min_length=3, max_length=100)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _strip_required(v)


class LessonCreateRequest(BaseModel):
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(default="", max_length=500)
    topics: List[str] = Field(default_factory=list)
    content: List[ContentBlock] = Field(default_factory=list)

    @field_validator("topics")
    @classmethod
    def validate_topics(cls, v: List[str]) -> List[str]:
        return [t.strip() for t in v if t and t.strip()]


class LessonUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    topics: Optional[List[str]] = None
    content: Optional[List[ContentBlock]] = None


class ModuleWithCourse(BaseModel):
    module: Module
    course: Course


class LessonWithModule(BaseModel):
    lesson: Lesson
    module: Module


class ModuleDeleted(BaseModel):
    module_id: int
    course: Optional[Course] = Field(default=None, description="Course the module was detached from, if any")


class Deleted(BaseModel):
    id: int
    deleted: bool = True


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Generic response wrapper to stabilize external API while allowing inner schema evolution.

    Always return this envelope so clients can rely on `request_id` and `status`, irrespective of changes in `data`.
    """
    request_id: str
    status: str
    data: T
