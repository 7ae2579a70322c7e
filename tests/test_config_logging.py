import json
import logging

from core.config import get_settings
from core.logging_config import JsonFormatter, RequestIdFilter, set_request_id


def test_settings_paths_follow_data_dir(monkeypatch):
    monkeypatch.setenv("DATA_DIR", "/srv/catalog")
    monkeypatch.setenv("LESSONS_JSON", "/tmp/lessons.json")
    monkeypatch.delenv("COURSES_JSON", raising=False)
    monkeypatch.delenv("MODULES_JSON", raising=False)
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.courses_json.replace("\\", "/") == "/srv/catalog/cours.json"
        assert settings.modules_json.replace("\\", "/") == "/srv/catalog/modules.json"
        assert settings.lessons_json == "/tmp/lessons.json"
    finally:
        get_settings.cache_clear()


def test_json_formatter_includes_request_id_and_extras():
    record = logging.LogRecord("services.lesson_store", logging.INFO, __file__, 1, "lesson_deleted", None, None)
    record.lesson_id = 3
    set_request_id("req-1")
    try:
        RequestIdFilter().filter(record)
    finally:
        set_request_id(None)

    line = json.loads(JsonFormatter().format(record))

    assert line == {
        "level": "INFO",
        "logger": "services.lesson_store",
        "message": "lesson_deleted",
        "request_id": "req-1",
        "lesson_id": 3,
    }
