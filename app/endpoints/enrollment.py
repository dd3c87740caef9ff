from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.enrollment import Enrollment
from app.schemas.response import APIResponse
from app.services.enrollment import enrollment_service
from app.utils import deps

router = APIRouter()


@router.post("/programs/{program_id}/enroll", response_model=APIResponse[Enrollment], status_code=status.HTTP_201_CREATED)
def enroll_in_program(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    enrollment = enrollment_service.enroll(db, program_id=program_id, current_user=current_user)
    return APIResponse(message="Enrolled successfully", data=enrollment)


@router.delete("/programs/{program_id}/enroll", response_model=APIResponse[Enrollment])
def unenroll_from_program(
    *,
    db: Session = Depends(deps.get_db),
    program_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    enrollment = enrollment_service.unenroll(db, program_id=program_id, current_user=current_user)
    return APIResponse(message="Unenrolled successfully", data=enrollment)


@router.get("/enrollments", response_model=APIResponse[List[Enrollment]])
def get_my_enrollments(
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    enrollments = enrollment_service.list_my_enrollments(db, current_user=current_user)
    return APIResponse(message="Enrollments retrieved successfully", data=enrollments)
