"""
Lesson collection store.

Deleting a lesson cascades: once the lesson document is written, every module
is stripped of references to the deleted id. The two writes are independent;
a failure between them leaves a dangling reference behind.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from schemas.lesson import ContentBlock, Lesson
from services.json_store import JsonCollection, next_id, parse_records
from services.module_store import ModuleStore

logger = logging.getLogger(__name__)

ContentLike = Union[ContentBlock, Dict[str, Any]]

_UPDATABLE_FIELDS = ("title", "description", "topics", "content")


def _dump(lesson: Lesson) -> Dict[str, Any]:
    return lesson.model_dump(exclude_none=True)


class LessonStore:
    """CRUD over the `lessons` collection with module-reference cleanup on delete."""

    def __init__(self, collection: JsonCollection, modules: ModuleStore):
        self.collection = collection
        self.modules = modules

    async def _load(self) -> List[Lesson]:
        return parse_records(Lesson, await self.collection.load(), self.collection.path)

    async def _save(self, lessons: List[Lesson]) -> None:
        await self.collection.save([_dump(lesson) for lesson in lessons])

    async def list(self) -> List[Lesson]:
        return await self._load()

    async def find_by_id(self, lesson_id: int) -> Optional[Lesson]:
        for lesson in await self._load():
            if lesson.id == lesson_id:
                return lesson
        return None

    async def create(
        self,
        title: str,
        description: str = "",
        topics: Optional[Sequence[str]] = None,
        content: Optional[Sequence[ContentLike]] = None,
    ) -> Lesson:
        lessons = await self._load()
        lesson = Lesson.model_validate({
            "id": next_id(lesson.id for lesson in lessons),
            "title": title,
            "description": description,
            "topics": list(topics or []),
            "content": [ContentBlock.model_validate(block) for block in content or []],
        })
        lessons.append(lesson)
        await self._save(lessons)
        logger.info("lesson_created", extra={"lesson_id": lesson.id})
        return lesson

    async def update(self, lesson_id: int, **fields: Any) -> Optional[Lesson]:
        """Merge the supplied fields (title, description, topics, content) into the lesson.

        Unknown field names raise TypeError; fields passed as None are treated as omitted.
        """
        unknown = set(fields) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise TypeError(f"Unexpected lesson fields: {sorted(unknown)}")

        lessons = await self._load()
        for index, lesson in enumerate(lessons):
            if lesson.id != lesson_id:
                continue
            merged = _dump(lesson)
            merged.update({k: v for k, v in fields.items() if v is not None})
            updated = Lesson.model_validate(merged)
            lessons[index] = updated
            await self._save(lessons)
            return updated
        return None

    async def delete(self, lesson_id: int) -> bool:
        """Remove the lesson, then strip its references from every module.

        Returns False without writing anything when the lesson does not exist.
        """
        lessons = await self._load()
        remaining = [lesson for lesson in lessons if lesson.id != lesson_id]
        if len(remaining) == len(lessons):
            return False
        await self._save(remaining)
        logger.info("lesson_deleted", extra={"lesson_id": lesson_id})
        await self.modules.remove_lesson_references(lesson_id)
        return True
