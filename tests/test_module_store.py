import pytest

from schemas.course import Reference
from services.module_store import ModuleStore
from fakes import MemoryCollection


@pytest.mark.asyncio
async def test_create_leaves_lessons_absent(coordinator, docs):
    module = await coordinator.modules.create("Getting started")

    assert module.id == 1
    assert module.lessons is None
    assert docs.modules() == [{"id": 1, "title": "Getting started"}]


@pytest.mark.asyncio
async def test_create_after_gap_uses_max_plus_one(seed, coordinator):
    seed(modules=[{"id": 3, "title": "Three"}, {"id": 8, "title": "Eight"}])

    module = await coordinator.modules.create("Next")

    assert module.id == 9


@pytest.mark.asyncio
async def test_find_and_list(seed, coordinator):
    seed(modules=[{"id": 1, "title": "One"}, {"id": 2, "title": "Two", "lessons": [{"id": 5}]}])

    assert [m.title for m in await coordinator.modules.list()] == ["One", "Two"]
    found = await coordinator.modules.find_by_id(2)
    assert found.lessons == [Reference(id=5)]
    assert await coordinator.modules.find_by_id(3) is None


@pytest.mark.asyncio
async def test_update_title_keeps_lessons(seed, coordinator, docs):
    seed(modules=[{"id": 1, "title": "One", "lessons": [{"id": 5}]}])

    updated = await coordinator.modules.update(1, title="Renamed")

    assert updated.title == "Renamed"
    assert docs.modules() == [{"id": 1, "title": "Renamed", "lessons": [{"id": 5}]}]


@pytest.mark.asyncio
async def test_update_lessons_keeps_title(seed, coordinator):
    seed(modules=[{"id": 1, "title": "One"}])

    updated = await coordinator.modules.update(1, lessons=[{"id": 2}])

    assert updated.title == "One"
    assert updated.lessons == [Reference(id=2)]


@pytest.mark.asyncio
async def test_update_missing_module_returns_none_without_write():
    store = ModuleStore(MemoryCollection([{"id": 1, "title": "One"}]))

    assert await store.update(5, title="x") is None
    assert store.collection.saves == 0


@pytest.mark.asyncio
async def test_delete_does_not_touch_courses(seed, coordinator, docs):
    seed(
        courses=[{"id": 1, "title": "C", "description": "D", "modules": [{"id": 1}]}],
        modules=[{"id": 1, "title": "One"}],
    )

    assert await coordinator.modules.delete(1) is True

    assert docs.modules() == []
    assert docs.courses()[0]["modules"] == [{"id": 1}]


@pytest.mark.asyncio
async def test_delete_missing_module_returns_false_without_write():
    store = ModuleStore(MemoryCollection([{"id": 1, "title": "One"}]))

    assert await store.delete(2) is False
    assert store.collection.saves == 0


@pytest.mark.asyncio
async def test_remove_lesson_references_strips_every_module():
    store = ModuleStore(MemoryCollection([
        {"id": 1, "title": "A", "lessons": [{"id": 1}, {"id": 2}]},
        {"id": 2, "title": "B", "lessons": [{"id": 2}, {"id": 1}]},
        {"id": 3, "title": "C"},
    ]))

    affected = await store.remove_lesson_references(1)

    assert [m.id for m in affected] == [1, 2]
    assert store.collection.items == [
        {"id": 1, "title": "A", "lessons": [{"id": 2}]},
        {"id": 2, "title": "B", "lessons": [{"id": 2}]},
        {"id": 3, "title": "C"},
    ]


@pytest.mark.asyncio
async def test_remove_lesson_references_writes_even_without_match():
    store = ModuleStore(MemoryCollection([{"id": 1, "title": "A", "lessons": [{"id": 2}]}]))

    affected = await store.remove_lesson_references(9)

    assert affected == []
    assert store.collection.saves == 1
