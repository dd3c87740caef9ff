from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.program import Program, ProgramCreate, ProgramUpdate
from app.schemas.response import APIResponse, PaginatedData
from app.services.program import program_service
from app.utils import deps

router = APIRouter()


@router.post("/", response_model=APIResponse[Program], status_code=status.HTTP_201_CREATED)
def create_program(
    *,
    db: Session = Depends(deps.get_db),
    program_in: ProgramCreate,
    current_user: User = Depends(deps.get_current_user)
):
    new_program = program_service.create_program(db, program_in=program_in, current_user=current_user)
    return APIResponse(message="Program created successfully", data=new_program)


@router.get("/", response_model=APIResponse[PaginatedData[Program]])
def list_programs(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user),
    skip: int = 0,
    limit: int = 100,
    instructor_id: Optional[int] = None,
):
    programs = program_service.list_programs(
        db, current_user=current_user, skip=skip, limit=limit, instructor_id=instructor_id
    )
    return APIResponse(message="Programs retrieved successfully", data=programs)


@router.get("/{program_id}", response_model=APIResponse[Program])
def read_program(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    program = program_service.get_program(db, program_id=program_id, current_user=current_user)
    return APIResponse(message="Program retrieved successfully", data=program)


@router.put("/{program_id}", response_model=APIResponse[Program])
def update_program(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    program_in: ProgramUpdate,
    current_user: User = Depends(deps.get_current_user)
):
    updated_program = program_service.update_program(
        db, program_id=program_id, program_in=program_in, current_user=current_user
    )
    return APIResponse(message="Program updated successfully", data=updated_program)


@router.delete("/{program_id}", response_model=APIResponse[Program])
def delete_program(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    deleted_program = program_service.delete_program(db, program_id=program_id, current_user=current_user)
    return APIResponse(message="Program deleted successfully", data=deleted_program)
