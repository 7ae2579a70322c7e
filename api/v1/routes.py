"""
Versioned API v1 routes.

Design choices:
- The router does not hardcode a version prefix; main.py mounts it using settings.api_v1_prefix. This allows changing the prefix centrally.
- Responses are wrapped in the generic ApiResponse to keep a stable envelope while inner data evolves.
- Handlers stay thin: every rule about ids, references and cascades lives in the stores and the RelationshipCoordinator.
"""
from __future__ import annotations

import logging
from typing import Annotated, List
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Path, status

from core.logging_config import get_request_id, set_request_id
from schemas.api import (
    ApiResponse,
    CourseBatchRequest,
    CourseCreateRequest,
    CourseUpdateRequest,
    Deleted,
    LessonCreateRequest,
    LessonUpdateRequest,
    LessonWithModule,
    ModuleCreateRequest,
    ModuleDeleted,
    ModuleUpdateRequest,
    ModuleWithCourse,
)
from schemas.course import Course, ExpandedCourse
from schemas.lesson import Lesson
from schemas.module import Module
from services.dependencies import get_coordinator
from services.json_store import StorageError
from services.relationships import RelationshipCoordinator

router = APIRouter()  # mounted under /api/v1 by main.py
logger = logging.getLogger("api")

EntityId = Annotated[int, Path(gt=0, description="Positive integer id")]


def _request_id() -> str:
    # RequestContextMiddleware normally binds one already
    req_id = get_request_id()
    if req_id is None:
        req_id = str(uuid4())
        set_request_id(req_id)
    return req_id


def _storage_failure(event: str, req_id: str, error: StorageError) -> HTTPException:
    logger.error(event, extra={"request_id": req_id, "error": str(error), "path": error.path})
    return HTTPException(status_code=500, detail="Storage is unavailable. Please try again later.")


# Courses

@router.get("/courses", response_model=ApiResponse[List[ExpandedCourse]], tags=["courses"])
async def list_courses(coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    """List every course with its modules and their lessons expanded."""
    req_id = _request_id()
    try:
        courses = await coordinator.courses.list_expanded()
    except StorageError as e:
        raise _storage_failure("list_courses_failed", req_id, e)
    logger.info("list_courses_completed", extra={"count": len(courses)})
    return ApiResponse[List[ExpandedCourse]](request_id=req_id, status="ok", data=courses)


@router.get("/courses/{course_id}", response_model=ApiResponse[Course], tags=["courses"])
async def get_course(course_id: EntityId, coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    req_id = _request_id()
    try:
        course = await coordinator.courses.find_by_id(course_id)
    except StorageError as e:
        raise _storage_failure("get_course_failed", req_id, e)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return ApiResponse[Course](request_id=req_id, status="ok", data=course)


@router.post("/courses", response_model=ApiResponse[Course], status_code=status.HTTP_201_CREATED, tags=["courses"])
async def create_course(request: CourseCreateRequest, coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    req_id = _request_id()
    try:
        course = await coordinator.courses.create(request.title, request.description)
    except StorageError as e:
        raise _storage_failure("create_course_failed", req_id, e)
    return ApiResponse[Course](request_id=req_id, status="ok", data=course)


@router.post(
    "/courses/batch",
    response_model=ApiResponse[List[Course]],
    status_code=status.HTTP_201_CREATED,
    tags=["courses"],
)
async def create_courses(request: CourseBatchRequest, coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    """Create several courses in one write."""
    req_id = _request_id()
    try:
        courses = await coordinator.courses.create_batch([item.model_dump() for item in request.courses])
    except StorageError as e:
        raise _storage_failure("create_courses_failed", req_id, e)
    return ApiResponse[List[Course]](request_id=req_id, status="ok", data=courses)


@router.put("/courses/{course_id}", response_model=ApiResponse[Course], tags=["courses"])
async def update_course(
    request: CourseUpdateRequest,
    course_id: EntityId,
    coordinator: RelationshipCoordinator = Depends(get_coordinator),
):
    req_id = _request_id()
    try:
        course = await coordinator.courses.update(
            course_id,
            title=request.title,
            description=request.description,
            modules=request.modules,
        )
    except StorageError as e:
        raise _storage_failure("update_course_failed", req_id, e)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return ApiResponse[Course](request_id=req_id, status="ok", data=course)


@router.delete("/courses/{course_id}", response_model=ApiResponse[Deleted], tags=["courses"])
async def delete_course(course_id: EntityId, coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    req_id = _request_id()
    try:
        deleted = await coordinator.courses.delete(course_id)
    except StorageError as e:
        raise _storage_failure("delete_course_failed", req_id, e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Course not found")
    return ApiResponse[Deleted](request_id=req_id, status="ok", data=Deleted(id=course_id))


# Modules

@router.get("/modules", response_model=ApiResponse[List[Module]], tags=["modules"])
async def list_modules(coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    req_id = _request_id()
    try:
        modules = await coordinator.modules.list()
    except StorageError as e:
        raise _storage_failure("list_modules_failed", req_id, e)
    return ApiResponse[List[Module]](request_id=req_id, status="ok", data=modules)


@router.get("/modules/{module_id}", response_model=ApiResponse[Module], tags=["modules"])
async def get_module(module_id: EntityId, coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    req_id = _request_id()
    try:
        module = await coordinator.modules.find_by_id(module_id)
    except StorageError as e:
        raise _storage_failure("get_module_failed", req_id, e)
    if module is None:
        raise HTTPException(status_code=404, detail="Module not found")
    return ApiResponse[Module](request_id=req_id, status="ok", data=module)


@router.post(
    "/courses/{course_id}/modules",
    response_model=ApiResponse[ModuleWithCourse],
    status_code=status.HTTP_201_CREATED,
    tags=["modules"],
)
async def create_module(
    request: ModuleCreateRequest,
    course_id: EntityId,
    coordinator: RelationshipCoordinator = Depends(get_coordinator),
):
    """Create a module and attach it to the course."""
    req_id = _request_id()
    try:
        result = await coordinator.create_module_in_course(course_id, request.title)
    except StorageError as e:
        raise _storage_failure("create_module_failed", req_id, e)
    if result is None:
        raise HTTPException(status_code=404, detail="Course not found")
    module, course = result
    return ApiResponse[ModuleWithCourse](
        request_id=req_id, status="ok", data=ModuleWithCourse(module=module, course=course)
    )


@router.put("/modules/{module_id}", response_model=ApiResponse[Module], tags=["modules"])
async def update_module(
    request: ModuleUpdateRequest,
    module_id: EntityId,
    coordinator: RelationshipCoordinator = Depends(get_coordinator),
):
    req_id = _request_id()
    try:
        module = await coordinator.modules.update(module_id, title=request.title)
    except StorageError as e:
        raise _storage_failure("update_module_failed", req_id, e)
    if module is None:
        raise HTTPException(status_code=404, detail="Module not found")
    return ApiResponse[Module](request_id=req_id, status="ok", data=module)


@router.delete("/modules/{module_id}", response_model=ApiResponse[ModuleDeleted], tags=["modules"])
async def delete_module(module_id: EntityId, coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    """Delete the module and detach it from its course."""
    req_id = _request_id()
    try:
        result = await coordinator.delete_module_cascade(module_id)
    except StorageError as e:
        raise _storage_failure("delete_module_failed", req_id, e)
    if not result.deleted:
        raise HTTPException(status_code=404, detail="Module not found")
    return ApiResponse[ModuleDeleted](
        request_id=req_id, status="ok", data=ModuleDeleted(module_id=module_id, course=result.course)
    )


# Lessons

@router.get("/lessons", response_model=ApiResponse[List[Lesson]], tags=["lessons"])
async def list_lessons(coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    req_id = _request_id()
    try:
        lessons = await coordinator.lessons.list()
    except StorageError as e:
        raise _storage_failure("list_lessons_failed", req_id, e)
    return ApiResponse[List[Lesson]](request_id=req_id, status="ok", data=lessons)


@router.get("/lessons/{lesson_id}", response_model=ApiResponse[Lesson], tags=["lessons"])
async def get_lesson(lesson_id: EntityId, coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    req_id = _request_id()
    try:
        lesson = await coordinator.lessons.find_by_id(lesson_id)
    except StorageError as e:
        raise _storage_failure("get_lesson_failed", req_id, e)
    if lesson is None:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return ApiResponse[Lesson](request_id=req_id, status="ok", data=lesson)


@router.post(
    "/modules/{module_id}/lessons",
    response_model=ApiResponse[LessonWithModule],
    status_code=status.HTTP_201_CREATED,
    tags=["lessons"],
)
async def create_lesson(
    request: LessonCreateRequest,
    module_id: EntityId,
    coordinator: RelationshipCoordinator = Depends(get_coordinator),
):
    """Create a lesson and attach it to the module."""
    req_id = _request_id()
    try:
        result = await coordinator.create_lesson_in_module(
            module_id,
            request.title,
            description=request.description,
            topics=request.topics,
            content=request.content,
        )
    except StorageError as e:
        raise _storage_failure("create_lesson_failed", req_id, e)
    if result is None:
        raise HTTPException(status_code=404, detail="Module not found")
    lesson, module = result
    return ApiResponse[LessonWithModule](
        request_id=req_id, status="ok", data=LessonWithModule(lesson=lesson, module=module)
    )


@router.put("/lessons/{lesson_id}", response_model=ApiResponse[Lesson], tags=["lessons"])
async def update_lesson(
    request: LessonUpdateRequest,
    lesson_id: EntityId,
    coordinator: RelationshipCoordinator = Depends(get_coordinator),
):
    req_id = _request_id()
    try:
        lesson = await coordinator.lessons.update(lesson_id, **request.model_dump(exclude_none=True))
    except StorageError as e:
        raise _storage_failure("update_lesson_failed", req_id, e)
    if lesson is None:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return ApiResponse[Lesson](request_id=req_id, status="ok", data=lesson)


@router.delete("/lessons/{lesson_id}", response_model=ApiResponse[Deleted], tags=["lessons"])
async def delete_lesson(lesson_id: EntityId, coordinator: RelationshipCoordinator = Depends(get_coordinator)):
    """Delete the lesson and strip it from every module."""
    req_id = _request_id()
    try:
        deleted = await coordinator.delete_lesson_cascade(lesson_id)
    except StorageError as e:
        raise _storage_failure("delete_lesson_failed", req_id, e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return ApiResponse[Deleted](request_id=req_id, status="ok", data=Deleted(id=lesson_id))
