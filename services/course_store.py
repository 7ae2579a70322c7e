"""
Course collection store.

Provides:
- Whole-document CRUD over the `cours` collection
- Batch creation with a single write
- Nested expansion (course -> modules -> lessons) for read

Deleting a course never cascades: its modules and lessons stay on disk,
simply no longer referenced by that course.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from schemas.course import Course, ExpandedCourse, ExpandedModule, Reference
from schemas.lesson import Lesson
from schemas.module import Module
from services.json_store import JsonCollection, next_id, parse_records
from services.lesson_store import LessonStore
from services.module_store import ModuleStore

logger = logging.getLogger(__name__)

ReferenceLike = Union[Reference, Dict[str, Any]]


def _dump(course: Course) -> Dict[str, Any]:
    return course.model_dump(exclude_none=True)


class CourseStore:
    """CRUD over the `cours` collection plus read-time expansion of its references."""

    def __init__(self, collection: JsonCollection, modules: ModuleStore, lessons: LessonStore):
        self.collection = collection
        self.modules = modules
        self.lessons = lessons

    async def _load(self) -> List[Course]:
        return parse_records(Course, await self.collection.load(), self.collection.path)

    async def _save(self, courses: List[Course]) -> None:
        await self.collection.save([_dump(c) for c in courses])

    async def list(self) -> List[Course]:
        return await self._load()

    async def list_expanded(self) -> List[ExpandedCourse]:
        """Return every course with its module references replaced by resolved modules.

        Each resolved module carries its resolved lessons. Any reference that does not
        resolve (module or lesson) is kept as the bare ``{"id": n}`` reference.
        """
        courses = await self._load()
        modules_by_id: Dict[int, Module] = {m.id: m for m in await self.modules.list()}
        lessons_by_id: Dict[int, Lesson] = {lesson.id: lesson for lesson in await self.lessons.list()}

        expanded: List[ExpandedCourse] = []
        for course in courses:
            entries: List[Union[ExpandedModule, Reference]] = []
            for ref in course.modules or []:
                module = modules_by_id.get(ref.id)
                if module is None:
                    entries.append(ref)
                    continue
                entries.append(ExpandedModule(
                    id=module.id,
                    title=module.title,
                    lessons=[lessons_by_id.get(lref.id, lref) for lref in module.lessons or []],
                ))
            expanded.append(ExpandedCourse(
                id=course.id,
                title=course.title,
                description=course.description,
                modules=entries,
            ))
        return expanded

    async def find_by_id(self, course_id: int) -> Optional[Course]:
        for course in await self._load():
            if course.id == course_id:
                return course
        return None

    async def create(self, title: str, description: str) -> Course:
        courses = await self._load()
        course = Course(id=next_id(c.id for c in courses), title=title, description=description, modules=[])
        courses.append(course)
        await self._save(courses)
        logger.info("course_created", extra={"course_id": course.id})
        return course

    async def create_batch(self, items: Sequence[Mapping[str, Any]]) -> List[Course]:
        """Create several courses with consecutive ids and a single write.

        The first id comes from the snapshot read before the batch; each item only
        needs `title` and `description`. An empty batch writes nothing.
        """
        if not items:
            return []
        courses = await self._load()
        first_id = next_id(c.id for c in courses)
        created = [
            Course(id=first_id + offset, title=item["title"], description=item["description"], modules=[])
            for offset, item in enumerate(items)
        ]
        courses.extend(created)
        await self._save(courses)
        logger.info("course_batch_created", extra={"count": len(created)})
        return created

    async def update(
        self,
        course_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        modules: Optional[Sequence[ReferenceLike]] = None,
    ) -> Optional[Course]:
        """Merge the supplied fields into the course; omitted (None) fields keep their value."""
        courses = await self._load()
        for index, course in enumerate(courses):
            if course.id != course_id:
                continue
            changes: Dict[str, Any] = {}
            if title is not None:
                changes["title"] = title
            if description is not None:
                changes["description"] = description
            if modules is not None:
                changes["modules"] = [Reference.model_validate(ref) for ref in modules]
            updated = course.model_copy(update=changes)
            courses[index] = updated
            await self._save(courses)
            return updated
        return None

    async def delete(self, course_id: int) -> bool:
        courses = await self._load()
        remaining = [c for c in courses if c.id != course_id]
        if len(remaining) == len(courses):
            return False
        await self._save(remaining)
        logger.info("course_deleted", extra={"course_id": course_id})
        return True

    async def save_all(self, courses: List[Course]) -> None:
        """Replace the whole collection; used by cross-collection cleanups."""
        await self._save(courses)
