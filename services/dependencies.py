"""
Dependency providers for FastAPI.

Stores hold no state besides their document path, so one shared instance per
process is enough. Tests swap them through app.dependency_overrides.
"""
from __future__ import annotations

from typing import Optional

from core.config import Settings, get_settings
from services.course_store import CourseStore
from services.json_store import JsonCollection
from services.lesson_store import LessonStore
from services.module_store import ModuleStore
from services.relationships import RelationshipCoordinator

COURSES_KEY = "cours"
MODULES_KEY = "modules"
LESSONS_KEY = "lessons"


def build_coordinator(settings: Settings) -> RelationshipCoordinator:
    """Wire the three stores and the coordinator onto the configured documents."""
    modules = ModuleStore(JsonCollection(settings.modules_json, MODULES_KEY))
    lessons = LessonStore(JsonCollection(settings.lessons_json, LESSONS_KEY), modules)
    courses = CourseStore(JsonCollection(settings.courses_json, COURSES_KEY), modules, lessons)
    return RelationshipCoordinator(courses, modules, lessons)


_coordinator_instance: Optional[RelationshipCoordinator] = None


def get_coordinator() -> RelationshipCoordinator:
    global _coordinator_instance
    if _coordinator_instance is None:
        _coordinator_instance = build_coordinator(get_settings())
    return _coordinator_instance


async def ensure_documents(coordinator: RelationshipCoordinator) -> None:
    """Create any missing collection document as an empty one."""
    await coordinator.modules.collection.ensure()
    await coordinator.lessons.collection.ensure()
    await coordinator.courses.collection.ensure()
