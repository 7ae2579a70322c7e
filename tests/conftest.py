import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from core.config import Settings
from services.dependencies import COURSES_KEY, LESSONS_KEY, MODULES_KEY, build_coordinator


def write_document(path: Path, key: str, items: List[Dict[str, Any]]) -> None:
    path.write_text(json.dumps({key: items}, indent=2), encoding="utf-8")


def read_document(path: Path, key: str) -> List[Dict[str, Any]]:
    return json.loads(path.read_text(encoding="utf-8"))[key]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path),
        courses_json=str(tmp_path / "cours.json"),
        modules_json=str(tmp_path / "modules.json"),
        lessons_json=str(tmp_path / "lessons.json"),
    )


@pytest.fixture
def seed(settings):
    """Write the three documents; every collection defaults to empty."""

    def _seed(courses=None, modules=None, lessons=None):
        write_document(Path(settings.courses_json), COURSES_KEY, courses or [])
        write_document(Path(settings.modules_json), MODULES_KEY, modules or [])
        write_document(Path(settings.lessons_json), LESSONS_KEY, lessons or [])

    _seed()
    return _seed


@pytest.fixture
def coordinator(settings, seed):
    return build_coordinator(settings)


@pytest.fixture
def docs(settings):
    """Read back the documents currently on disk."""

    class _Docs:
        def courses(self):
            return read_document(Path(settings.courses_json), COURSES_KEY)

        def modules(self):
            return read_document(Path(settings.modules_json), MODULES_KEY)

        def lessons(self):
            return read_document(Path(settings.lessons_json), LESSONS_KEY)

    return _Docs()
