import json

import pytest

from schemas.lesson import Lesson
from services.json_store import (
    JsonCollection,
    StorageError,
    ensure_document,
    load_collection,
    next_id,
    parse_records,
    save_collection,
)


def test_next_id_empty_and_with_gaps():
    assert next_id([]) == 1
    assert next_id([1, 2, 3]) == 4
    # Gaps are never filled
    assert next_id([7, 2]) == 8


@pytest.mark.asyncio
async def test_load_returns_list_under_key(tmp_path):
    path = tmp_path / "modules.json"
    path.write_text(json.dumps({"modules": [{"id": 1, "title": "Basics"}]}), encoding="utf-8")

    items = await load_collection(path, "modules")

    assert items == [{"id": 1, "title": "Basics"}]


@pytest.mark.asyncio
async def test_load_missing_key_is_empty(tmp_path):
    path = tmp_path / "lessons.json"
    path.write_text("{}", encoding="utf-8")

    assert await load_collection(path, "lessons") == []


@pytest.mark.asyncio
async def test_load_missing_file_raises_storage_error(tmp_path):
    with pytest.raises(StorageError) as exc:
        await load_collection(tmp_path / "nope.json", "cours")
    assert exc.value.path.endswith("nope.json")


@pytest.mark.asyncio
async def test_load_malformed_json_raises_storage_error(tmp_path):
    path = tmp_path / "cours.json"
    path.write_text('{"cours": [', encoding="utf-8")

    with pytest.raises(StorageError):
        await load_collection(path, "cours")


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", ['[1, 2]', '{"cours": {"id": 1}}'])
async def test_load_unexpected_shape_raises_storage_error(tmp_path, payload):
    path = tmp_path / "cours.json"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(StorageError):
        await load_collection(path, "cours")


@pytest.mark.asyncio
async def test_save_replaces_whole_document(tmp_path):
    path = tmp_path / "cours.json"
    path.write_text(json.dumps({"cours": [{"id": 1}], "stale": True}), encoding="utf-8")

    await save_collection(path, "cours", [{"id": 2, "title": "Élan"}])

    text = path.read_text(encoding="utf-8")
    assert json.loads(text) == {"cours": [{"id": 2, "title": "Élan"}]}
    # Stable, human readable formatting
    assert text.startswith('{\n  "cours": [')
    assert "Élan" in text
    # No temporary files left behind
    assert [p.name for p in tmp_path.iterdir()] == ["cours.json"]


@pytest.mark.asyncio
async def test_save_into_missing_directory_raises_storage_error(tmp_path):
    with pytest.raises(StorageError):
        await save_collection(tmp_path / "missing" / "cours.json", "cours", [])


@pytest.mark.asyncio
async def test_ensure_document_creates_once(tmp_path):
    path = tmp_path / "data" / "modules.json"

    assert await ensure_document(path, "modules") is True
    assert json.loads(path.read_text(encoding="utf-8")) == {"modules": []}

    path.write_text(json.dumps({"modules": [{"id": 3, "title": "Kept"}]}), encoding="utf-8")
    assert await ensure_document(path, "modules") is False
    assert await load_collection(path, "modules") == [{"id": 3, "title": "Kept"}]


@pytest.mark.asyncio
async def test_json_collection_round_trip(tmp_path):
    collection = JsonCollection(tmp_path / "lessons.json", "lessons")
    await collection.ensure()

    await collection.save([{"id": 1, "title": "Intro"}])

    assert await collection.load() == [{"id": 1, "title": "Intro"}]
    assert "lessons.json" in repr(collection)


def test_parse_records_validates_into_models():
    lessons = parse_records(Lesson, [{"id": 1, "title": "Intro"}], "lessons.json")

    assert lessons == [Lesson(id=1, title="Intro")]


def test_parse_records_rejects_schema_invalid_record():
    with pytest.raises(StorageError) as excinfo:
        parse_records(Lesson, [{"id": 1, "title": "L", "content": [{"type": "text"}]}], "lessons.json")

    assert excinfo.value.path == "lessons.json"
    assert excinfo.value.__cause__ is not None
