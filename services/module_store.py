"""
Module collection store.

Every call reads the full `modules` document, works on the in-memory list and
writes the full document back. Deleting a module does not touch any course;
the course-side cleanup belongs to RelationshipCoordinator.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from schemas.course import Reference
from schemas.module import Module
from services.json_store import JsonCollection, next_id, parse_records

logger = logging.getLogger(__name__)

ReferenceLike = Union[Reference, Dict[str, Any]]


def _dump(module: Module) -> Dict[str, Any]:
    return module.model_dump(exclude_none=True)


class ModuleStore:
    """CRUD over the `modules` collection."""

    def __init__(self, collection: JsonCollection):
        self.collection = collection

    async def _load(self) -> List[Module]:
        return parse_records(Module, await self.collection.load(), self.collection.path)

    async def _save(self, modules: List[Module]) -> None:
        await self.collection.save([_dump(m) for m in modules])

    async def list(self) -> List[Module]:
        return await self._load()

    async def find_by_id(self, module_id: int) -> Optional[Module]:
        for module in await self._load():
            if module.id == module_id:
                return module
        return None

    async def create(self, title: str) -> Module:
        """Append a new module; `lessons` stays absent until a lesson is assigned."""
        modules = await self._load()
        module = Module(id=next_id(m.id for m in modules), title=title)
        modules.append(module)
        await self._save(modules)
        logger.info("module_created", extra={"module_id": module.id})
        return module

    async def update(
        self,
        module_id: int,
        title: Optional[str] = None,
        lessons: Optional[Sequence[ReferenceLike]] = None,
    ) -> Optional[Module]:
        """Merge the supplied fields into the module; omitted (None) fields keep their value."""
        modules = await self._load()
        for index, module in enumerate(modules):
            if module.id != module_id:
                continue
            changes: Dict[str, Any] = {}
            if title is not None:
                changes["title"] = title
            if lessons is not None:
                changes["lessons"] = [Reference.model_validate(ref) for ref in lessons]
            updated = module.model_copy(update=changes)
            modules[index] = updated
            await self._save(modules)
            return updated
        return None

    async def delete(self, module_id: int) -> bool:
        modules = await self._load()
        remaining = [m for m in modules if m.id != module_id]
        if len(remaining) == len(modules):
            return False
        await self._save(remaining)
        logger.info("module_deleted", extra={"module_id": module_id})
        return True

    async def remove_lesson_references(self, lesson_id: int) -> List[Module]:
        """Strip every reference to `lesson_id` from every module.

        The whole collection is written back even when no module referenced the
        lesson. Returns the modules that lost a reference.
        """
        modules = await self._load()
        affected: List[Module] = []
        for module in modules:
            if module.lessons is None:
                continue
            kept = [ref for ref in module.lessons if ref.id != lesson_id]
            if len(kept) != len(module.lessons):
                module.lessons = kept
                affected.append(module)
        await self._save(modules)
        logger.info(
            "lesson_references_removed",
            extra={"lesson_id": lesson_id, "count": len(affected)},
        )
        return affected
