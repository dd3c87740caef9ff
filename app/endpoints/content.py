from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.content import (
    Lesson,
    LessonCreate,
    LessonUpdate,
    Module,
    ModuleCreate,
    ModuleUpdate,
    ProgramLearningContent,
    ReorderRequest,
    Resource,
    ResourceCreate,
    ResourceUpdate,
)
from app.schemas.response import APIResponse
from app.services.content import content_service
from app.services.file_storage import FileStorageService, FileUpload
from app.utils import deps

router = APIRouter()


async def _read_upload(file: Optional[UploadFile]) -> Optional[FileUpload]:
    if file is None or not file.filename:
        return None
    content = await file.read()
    return FileUpload(content=content, filename=file.filename, content_type=file.content_type)


@router.get("/{program_id}/learning-content", response_model=APIResponse[ProgramLearningContent])
def get_program_learning_content(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    content = content_service.get_program_learning_content(db, program_id=program_id, current_user=current_user)
    return APIResponse(message="Learning content retrieved successfully", data=content)


# Modules

@router.post("/{program_id}/modules", response_model=APIResponse[Module], status_code=status.HTTP_201_CREATED)
def create_module(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    module_in: ModuleCreate,
    current_user: User = Depends(deps.get_current_user)
):
    module = content_service.create_module(db, program_id=program_id, module_in=module_in, current_user=current_user)
    return APIResponse(message="Module created successfully", data=module)


@router.get("/{program_id}/modules", response_model=APIResponse[List[Module]])
def list_modules(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    modules = content_service.list_modules(db, program_id=program_id, current_user=current_user)
    return APIResponse(message="Modules retrieved successfully", data=modules)


@router.put("/{program_id}/modules/reorder", response_model=APIResponse[List[Module]])
def reorder_modules(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    reorder_in: ReorderRequest,
    current_user: User = Depends(deps.get_current_user)
):
    modules = content_service.reorder_modules(
        db, program_id=program_id, ordered_ids=reorder_in.ordered_ids, current_user=current_user
    )
    return APIResponse(message="Modules reordered successfully", data=modules)


@router.put("/modules/{module_id}", response_model=APIResponse[Module])
def update_module(
    *,
    db: Session = Depends(deps.get_db),
    module_id: int,
    module_in: ModuleUpdate,
    current_user: User = Depends(deps.get_current_user)
):
    module = content_service.update_module(db, module_id=module_id, module_in=module_in, current_user=current_user)
    return APIResponse(message="Module updated successfully", data=module)


@router.delete("/modules/{module_id}", response_model=APIResponse)
def delete_module(
    *,
    db: Session = Depends(deps.get_db),
    module_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    content_service.delete_module(db, module_id=module_id, current_user=current_user)
    return APIResponse(message="Module deleted successfully")


# Lessons

@router.post("/modules/{module_id}/lessons", response_model=APIResponse[Lesson], status_code=status.HTTP_201_CREATED)
def create_lesson(
    *,
    db: Session = Depends(deps.get_db),
    module_id: int,
    lesson_in: LessonCreate,
    current_user: User = Depends(deps.get_current_user)
):
    lesson = content_service.create_lesson(db, module_id=module_id, lesson_in=lesson_in, current_user=current_user)
    return APIResponse(message="Lesson created successfully", data=lesson)


@router.get("/modules/{module_id}/lessons", response_model=APIResponse[List[Lesson]])
def list_lessons(
    *,
    db: Session = Depends(deps.get_db),
    module_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    lessons = content_service.list_lessons(db, module_id=module_id, current_user=current_user)
    return APIResponse(message="Lessons retrieved successfully", data=lessons)


@router.put("/modules/{module_id}/lessons/reorder", response_model=APIResponse[List[Lesson]])
def reorder_lessons(
    *,
    db: Session = Depends(deps.get_db),
    module_id: int,
    reorder_in: ReorderRequest,
    current_user: User = Depends(deps.get_current_user)
):
    lessons = content_service.reorder_lessons(
        db, module_id=module_id, ordered_ids=reorder_in.ordered_ids, current_user=current_user
    )
    return APIResponse(message="Lessons reordered successfully", data=lessons)


@router.put("/lessons/{lesson_id}", response_model=APIResponse[Lesson])
def update_lesson(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    lesson_in: LessonUpdate,
    current_user: User = Depends(deps.get_current_user)
):
    lesson = content_service.update_lesson(db, lesson_id=lesson_id, lesson_in=lesson_in, current_user=current_user)
    return APIResponse(message="Lesson updated successfully", data=lesson)


@router.delete("/lessons/{lesson_id}", response_model=APIResponse)
def delete_lesson(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    content_service.delete_lesson(db, lesson_id=lesson_id, current_user=current_user)
    return APIResponse(message="Lesson deleted successfully")


# Resources

@router.post("/lessons/{lesson_id}/resources", response_model=APIResponse[Resource], status_code=status.HTTP_201_CREATED)
async def create_resource(
    lesson_id: int,
    title: str = Form(...),
    description: Optional[str] = Form(None),
    file_url: Optional[str] = Form(None),
    file_type: Optional[str] = Form(None),
    file_size_bytes: Optional[int] = Form(None, ge=0),
    order_index: Optional[int] = Form(None, ge=0),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(deps.get_db),
    storage: FileStorageService = Depends(deps.get_file_storage),
    current_user: User = Depends(deps.get_current_user)
):
    """Multipart form; an attached file overrides file_url, file_type and file_size_bytes."""
    resource_in = ResourceCreate(
        title=title,
        description=description,
        file_url=file_url,
        file_type=file_type,
        file_size_bytes=file_size_bytes,
        order_index=order_index,
    )
    resource = content_service.create_resource(
        db,
        lesson_id=lesson_id,
        resource_in=resource_in,
        current_user=current_user,
        storage=storage,
        upload=await _read_upload(file),
    )
    return APIResponse(message="Resource created successfully", data=resource)


@router.get("/lessons/{lesson_id}/resources", response_model=APIResponse[List[Resource]])
def list_resources(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    resources = content_service.list_resources(db, lesson_id=lesson_id, current_user=current_user)
    return APIResponse(message="Resources retrieved successfully", data=resources)


@router.put("/lessons/{lesson_id}/resources/reorder", response_model=APIResponse[List[Resource]])
def reorder_resources(
    *,
    db: Session = Depends(deps.get_db),
    lesson_id: int,
    reorder_in: ReorderRequest,
    current_user: User = Depends(deps.get_current_user)
):
    resources = content_service.reorder_resources(
        db, lesson_id=lesson_id, ordered_ids=reorder_in.ordered_ids, current_user=current_user
    )
    return APIResponse(message="Resources reordered successfully", data=resources)


@router.put("/resources/{resource_id}", response_model=APIResponse[Resource])
async def update_resource(
    resource_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    file_url: Optional[str] = Form(None),
    file_type: Optional[str] = Form(None),
    file_size_bytes: Optional[int] = Form(None, ge=0),
    order_index: Optional[int] = Form(None, ge=0),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(deps.get_db),
    storage: FileStorageService = Depends(deps.get_file_storage),
    current_user: User = Depends(deps.get_current_user)
):
    fields = {
        "title": title,
        "description": description,
        "file_url": file_url,
        "file_type": file_type,
        "file_size_bytes": file_size_bytes,
        "order_index": order_index,
    }
    resource_in = ResourceUpdate(**{k: v for k, v in fields.items() if v is not None})
    resource = content_service.update_resource(
        db,
        resource_id=resource_id,
        resource_in=resource_in,
        current_user=current_user,
        storage=storage,
        upload=await _read_upload(file),
    )
    return APIResponse(message="Resource updated successfully", data=resource)


@router.delete("/resources/{resource_id}", response_model=APIResponse)
def delete_resource(
    *,
    db: Session = Depends(deps.get_db),
    resource_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    content_service.delete_resource(db, resource_id=resource_id, current_user=current_user)
    return APIResponse(message="Resource deleted successfully")
