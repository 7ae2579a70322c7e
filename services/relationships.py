"""
Cross-collection relationship maintenance.

RelationshipCoordinator owns every operation that touches more than one
collection: assigning modules to courses and lessons to modules, creating an
entity together with its parent link, and cascading deletes.

None of these operations is transactional. Each step is an independent
whole-document write, so a failure part way through can leave, for example,
a module deleted while a course still references it. Nothing is rolled back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from schemas.course import Course, Reference
from schemas.lesson import Lesson
from schemas.module import Module
from services.course_store import CourseStore
from services.lesson_store import LessonStore
from services.module_store import ModuleStore

logger = logging.getLogger(__name__)


@dataclass
class ModuleDeletion:
    deleted: bool
    course: Optional[Course] = None


class RelationshipCoordinator:
    def __init__(self, courses: CourseStore, modules: ModuleStore, lessons: LessonStore):
        self.courses = courses
        self.modules = modules
        self.lessons = lessons

    async def assign_module_to_course(self, module_id: int, course_id: int) -> Optional[Course]:
        """Add a reference to `module_id` on the course, once.

        Returns None when the course does not exist. The module itself is not checked.
        """
        course = await self.courses.find_by_id(course_id)
        if course is None:
            return None
        refs: List[Reference] = list(course.modules or [])
        if not course.references_module(module_id):
            refs.append(Reference(id=module_id))
        updated = await self.courses.update(course.id, modules=refs)
        logger.info("module_assigned", extra={"module_id": module_id, "course_id": course_id})
        return updated

    async def assign_lesson_to_module(self, module_id: int, lesson_id: int) -> Optional[Module]:
        """Add a reference to `lesson_id` on the module, once.

        Returns None when the module does not exist. The lesson itself is not checked.
        """
        module = await self.modules.find_by_id(module_id)
        if module is None:
            return None
        refs: List[Reference] = list(module.lessons or [])
        if not module.references_lesson(lesson_id):
            refs.append(Reference(id=lesson_id))
        updated = await self.modules.update(module.id, lessons=refs)
        logger.info("lesson_assigned", extra={"lesson_id": lesson_id, "module_id": module_id})
        return updated

    async def remove_module_from_course(self, module_id: int) -> Optional[Course]:
        """Drop the first reference to `module_id` from every course holding one.

        The course collection is written once, and only if a course changed. Returns the
        first affected course in collection order, or None when no course referenced it.
        """
        courses = await self.courses.list()
        first_affected: Optional[Course] = None
        for course in courses:
            if not course.references_module(module_id):
                continue
            refs = list(course.modules or [])
            index = next(i for i, ref in enumerate(refs) if ref.id == module_id)
            del refs[index]
            course.modules = refs
            if first_affected is None:
                first_affected = course
            else:
                logger.warning(
                    "module_referenced_by_several_courses",
                    extra={"module_id": module_id, "course_id": course.id},
                )

        if first_affected is not None:
            await self.courses.save_all(courses)
        return first_affected

    async def delete_module_cascade(self, module_id: int) -> ModuleDeletion:
        """Delete the module, then remove it from the course that referenced it."""
        if not await self.modules.delete(module_id):
            return ModuleDeletion(deleted=False)
        course = await self.remove_module_from_course(module_id)
        logger.info(
            "module_cascade_deleted",
            extra={"module_id": module_id, "course_id": course.id if course else None},
        )
        return ModuleDeletion(deleted=True, course=course)

    async def delete_lesson_cascade(self, lesson_id: int) -> bool:
        """Delete the lesson and strip its references from every module."""
        return await self.lessons.delete(lesson_id)

    async def create_module_in_course(self, course_id: int, title: str) -> Optional[Tuple[Module, Course]]:
        """Create a module and attach it to an existing course.

        Returns None, without creating anything, when the course does not exist.
        """
        if await self.courses.find_by_id(course_id) is None:
            return None
        module = await self.modules.create(title)
        course = await self.assign_module_to_course(module.id, course_id)
        if course is None:
            # Course vanished between the check and the assignment
            return None
        return module, course

    async def create_lesson_in_module(
        self,
        module_id: int,
        title: str,
        description: str = "",
        topics: Optional[Sequence[str]] = None,
        content: Optional[Sequence[Any]] = None,
    ) -> Optional[Tuple[Lesson, Module]]:
        """Create a lesson and attach it to an existing module.

        Returns None, without creating anything, when the module does not exist.
        """
        if await self.modules.find_by_id(module_id) is None:
            return None
        lesson = await self.lessons.create(title, description=description, topics=topics, content=content)
        module = await self.assign_lesson_to_module(module_id, lesson.id)
        if module is None:
            return None
        return lesson, module
