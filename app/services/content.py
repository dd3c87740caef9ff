import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from app.core.constants import RESOURCES_SUBDIRECTORY
from app.core.exceptions import NotFoundError, ValidationError
from app.crud.lesson_progress import lesson_progress as crud_lesson_progress
from app.crud.program import program as crud_program
from app.crud.program_lesson import program_lesson as crud_program_lesson
from app.crud.program_module import program_module as crud_program_module
from app.crud.program_resource import program_resource as crud_program_resource
from app.models.program import Program as ProgramModel
from app.models.program_lesson import ProgramLesson
from app.models.program_module import ProgramModule
from app.models.program_resource import ProgramResource
from app.models.user import User
from app.schemas.content import (
    Lesson,
    LessonCreate,
    LessonUpdate,
    Module,
    ModuleCreate,
    ModuleUpdate,
    ProgramLearningContent,
    Resource,
    ResourceCreate,
    ResourceUpdate,
)
from app.services.audit_log import AuditLogService, audit_log_service
from app.services.file_storage import FileStorageService, FileUpload
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class ContentService:
    """Program -> Module -> Lesson -> Resource tree: authoring, ordering and the learner view."""

    def __init__(self, audit_log: AuditLogService):
        self.audit_log = audit_log

    # Lookups

    def _get_program(self, db: Session, program_id: int) -> ProgramModel:
        program = crud_program.get(db, id=program_id)
        if not program:
            raise NotFoundError("Program not found.")
        return program

    def _get_module(self, db: Session, module_id: int) -> ProgramModule:
        module = crud_program_module.get(db, id=module_id)
        if not module:
            raise NotFoundError("Module not found.")
        return module

    def _get_lesson(self, db: Session, lesson_id: int) -> ProgramLesson:
        lesson = crud_program_lesson.get(db, id=lesson_id)
        if not lesson:
            raise NotFoundError("Lesson not found.")
        return lesson

    def _get_resource(self, db: Session, resource_id: int) -> ProgramResource:
        resource = crud_program_resource.get(db, id=resource_id)
        if not resource:
            raise NotFoundError("Resource not found.")
        return resource

    # Ordering

    def _apply_order(self, siblings: List, ordered_ids: List[int], kind: str) -> List:
        by_id = {s.id: s for s in siblings}
        if len(set(ordered_ids)) != len(ordered_ids):
            raise ValidationError(f"Duplicate {kind} ids in reorder request.")
        foreign = [i for i in ordered_ids if i not in by_id]
        if foreign:
            raise ValidationError(f"{kind.capitalize()} ids {foreign} do not belong to this parent.")
        if len(ordered_ids) != len(siblings):
            raise ValidationError(f"Reorder request must list every {kind} exactly once.")

        for position, sibling_id in enumerate(ordered_ids):
            by_id[sibling_id].order_index = position
        return [by_id[i] for i in ordered_ids]

    def _compact(self, siblings: List):
        for position, sibling in enumerate(siblings):
            if sibling.order_index != position:
                sibling.order_index = position

    def _place(self, siblings: List, item, position: Optional[int]):
        """Insert ``item`` at ``position`` (clamped, None appends) and renumber the group 0..n-1."""
        others = [s for s in siblings if s.id != item.id]
        if position is None or position > len(others):
            position = len(others)
        others.insert(position, item)
        self._compact(others)

    # Modules

    def create_module(self, db: Session, program_id: int, module_in: ModuleCreate, current_user: User) -> Module:
        program = self._get_program(db, program_id)
        permission_helper.require_program_management_permission(current_user, program)

        siblings = crud_program_module.get_by_parent(db, parent_id=program.id)
        module_data = module_in.model_dump()
        position = module_data.pop("order_index")
        module_data.update(program_id=program.id, order_index=len(siblings))

        module = crud_program_module.create(db, obj_in=module_data, commit=False)
        self._place(siblings, module, position)
        self.audit_log.record(db, current_user, f"Created module '{module.title}' in program {program.name}")
        db.commit()
        db.refresh(module)
        return Module.model_validate(module)

    def update_module(self, db: Session, module_id: int, module_in: ModuleUpdate, current_user: User) -> Module:
        module = self._get_module(db, module_id)
        permission_helper.require_program_management_permission(current_user, module.program)

        update_data = module_in.model_dump(exclude_unset=True)
        position = update_data.pop("order_index", None)
        updated = crud_program_module.update(db, db_obj=module, obj_in=update_data, commit=False)
        if position is not None:
            self._place(crud_program_module.get_by_parent(db, parent_id=updated.program_id), updated, position)
        self.audit_log.record(db, current_user, f"Updated module '{updated.title}'")
        db.commit()
        db.refresh(updated)
        return Module.model_validate(updated)

    def delete_module(self, db: Session, module_id: int, current_user: User) -> None:
        module = self._get_module(db, module_id)
        permission_helper.require_program_management_permission(current_user, module.program)

        program_id, title = module.program_id, module.title
        crud_program_module.delete(db, id=module.id, commit=False)
        self._compact(crud_program_module.get_by_parent(db, parent_id=program_id))
        self.audit_log.record(db, current_user, f"Deleted module '{title}'")
        db.commit()

    def list_modules(self, db: Session, program_id: int, current_user: User) -> List[Module]:
        program = self._get_program(db, program_id)
        modules = crud_program_module.get_with_lessons(db, program_id=program.id)
        if permission_helper.can_manage(current_user, program.instructor_id):
            return [Module.model_validate(m) for m in modules]

        permission_helper.require_program_view_permission(db, current_user, program)
        return [
            self._published_module_view(m, [l for l in m.lessons if l.is_published])
            for m in modules
            if m.is_published
        ]

    def reorder_modules(self, db: Session, program_id: int, ordered_ids: List[int], current_user: User) -> List[Module]:
        program = self._get_program(db, program_id)
        permission_helper.require_program_management_permission(current_user, program)

        siblings = crud_program_module.get_by_parent(db, parent_id=program.id)
        ordered = self._apply_order(siblings, ordered_ids, "module")
        self.audit_log.record(db, current_user, f"Reordered modules in program {program.name}")
        db.commit()
        return [Module.model_validate(m) for m in ordered]

    # Lessons

    def create_lesson(self, db: Session, module_id: int, lesson_in: LessonCreate, current_user: User) -> Lesson:
        module = self._get_module(db, module_id)
        permission_helper.require_program_management_permission(current_user, module.program)

        siblings = crud_program_lesson.get_by_parent(db, parent_id=module.id)
        lesson_data = lesson_in.model_dump()
        position = lesson_data.pop("order_index")
        lesson_data.update(module_id=module.id, order_index=len(siblings))

        lesson = crud_program_lesson.create(db, obj_in=lesson_data, commit=False)
        self._place(siblings, lesson, position)
        self.audit_log.record(db, current_user, f"Created lesson '{lesson.title}' in module '{module.title}'")
        db.commit()
        db.refresh(lesson)
        return Lesson.model_validate(lesson)

    def update_lesson(self, db: Session, lesson_id: int, lesson_in: LessonUpdate, current_user: User) -> Lesson:
        lesson = self._get_lesson(db, lesson_id)
        permission_helper.require_program_management_permission(current_user, lesson.module.program)

        update_data = lesson_in.model_dump(exclude_unset=True)
        position = update_data.pop("order_index", None)
        updated = crud_program_lesson.update(db, db_obj=lesson, obj_in=update_data, commit=False)
        if position is not None:
            self._place(crud_program_lesson.get_by_parent(db, parent_id=updated.module_id), updated, position)
        self.audit_log.record(db, current_user, f"Updated lesson '{updated.title}'")
        db.commit()
        db.refresh(updated)
        return Lesson.model_validate(updated)

    def delete_lesson(self, db: Session, lesson_id: int, current_user: User) -> None:
        lesson = self._get_lesson(db, lesson_id)
        permission_helper.require_program_management_permission(current_user, lesson.module.program)

        module_id, title = lesson.module_id, lesson.title
        crud_program_lesson.delete(db, id=lesson.id, commit=False)
        self._compact(crud_program_lesson.get_by_parent(db, parent_id=module_id))
        self.audit_log.record(db, current_user, f"Deleted lesson '{title}'")
        db.commit()

    def list_lessons(self, db: Session, module_id: int, current_user: User) -> List[Lesson]:
        module = self._get_module(db, module_id)
        lessons = crud_program_lesson.get_by_module(db, module_id=module.id)
        if permission_helper.can_manage(current_user, module.program.instructor_id):
            return [Lesson.model_validate(l) for l in lessons]

        permission_helper.require_program_view_permission(db, current_user, module.program)
        if not module.is_published:
            raise NotFoundError("Module not found.")
        return [Lesson.model_validate(l) for l in lessons if l.is_published]

    def reorder_lessons(self, db: Session, module_id: int, ordered_ids: List[int], current_user: User) -> List[Lesson]:
        module = self._get_module(db, module_id)
        permission_helper.require_program_management_permission(current_user, module.program)

        siblings = crud_program_lesson.get_by_module(db, module_id=module.id)
        ordered = self._apply_order(siblings, ordered_ids, "lesson")
        self.audit_log.record(db, current_user, f"Reordered lessons in module '{module.title}'")
        db.commit()
        return [Lesson.model_validate(l) for l in ordered]

    # Resources

    def _store_upload(self, storage: FileStorageService, upload: FileUpload) -> dict:
        stored = storage.store(upload.content, upload.filename, upload.content_type, RESOURCES_SUBDIRECTORY)
        return {
            "file_url": stored.url,
            "file_type": stored.content_type,
            "file_size_bytes": stored.size_bytes,
        }

    def create_resource(
        self,
        db: Session,
        lesson_id: int,
        resource_in: ResourceCreate,
        current_user: User,
        storage: Optional[FileStorageService] = None,
        upload: Optional[FileUpload] = None,
    ) -> Resource:
        lesson = self._get_lesson(db, lesson_id)
        permission_helper.require_program_management_permission(current_user, lesson.module.program)

        resource_data = resource_in.model_dump()
        if upload is not None:
            if storage is None:
                raise ValidationError("File uploads are not available.")
            resource_data.update(self._store_upload(storage, upload))
        if not resource_data.get("file_url"):
            raise ValidationError("A file or file_url is required.")
        if not resource_data.get("file_type"):
            raise ValidationError("file_type is required when no file is uploaded.")
        siblings = crud_program_resource.get_by_parent(db, parent_id=lesson.id)
        position = resource_data.pop("order_index")
        resource_data.update(lesson_id=lesson.id, order_index=len(siblings))

        resource = crud_program_resource.create(db, obj_in=resource_data, commit=False)
        self._place(siblings, resource, position)
        self.audit_log.record(db, current_user, f"Created resource '{resource.title}' in lesson '{lesson.title}'")
        db.commit()
        db.refresh(resource)
        return Resource.model_validate(resource)

    def update_resource(
        self,
        db: Session,
        resource_id: int,
        resource_in: ResourceUpdate,
        current_user: User,
        storage: Optional[FileStorageService] = None,
        upload: Optional[FileUpload] = None,
    ) -> Resource:
        resource = self._get_resource(db, resource_id)
        permission_helper.require_program_management_permission(current_user, resource.lesson.module.program)

        update_data = resource_in.model_dump(exclude_unset=True)
        for required in ("title", "file_url", "file_type"):
            if required in update_data and not update_data[required]:
                raise ValidationError(f"{required} cannot be empty.")
        if upload is not None:
            if storage is None:
                raise ValidationError("File uploads are not available.")
            update_data.update(self._store_upload(storage, upload))

        position = update_data.pop("order_index", None)
        updated = crud_program_resource.update(db, db_obj=resource, obj_in=update_data, commit=False)
        if position is not None:
            self._place(crud_program_resource.get_by_parent(db, parent_id=updated.lesson_id), updated, position)
        self.audit_log.record(db, current_user, f"Updated resource '{updated.title}'")
        db.commit()
        db.refresh(updated)
        return Resource.model_validate(updated)

    def delete_resource(self, db: Session, resource_id: int, current_user: User) -> None:
        resource = self._get_resource(db, resource_id)
        permission_helper.require_program_management_permission(current_user, resource.lesson.module.program)

        lesson_id, title = resource.lesson_id, resource.title
        crud_program_resource.delete(db, id=resource.id, commit=False)
        self._compact(crud_program_resource.get_by_parent(db, parent_id=lesson_id))
        self.audit_log.record(db, current_user, f"Deleted resource '{title}'")
        db.commit()

    def list_resources(self, db: Session, lesson_id: int, current_user: User) -> List[Resource]:
        lesson = self._get_lesson(db, lesson_id)
        program = lesson.module.program
        if not permission_helper.can_manage(current_user, program.instructor_id):
            permission_helper.require_program_view_permission(db, current_user, program)
            if not (lesson.is_published and lesson.module.is_published):
                raise NotFoundError("Lesson not found.")
        resources = crud_program_resource.get_by_parent(db, parent_id=lesson.id)
        return [Resource.model_validate(r) for r in resources]

    def reorder_resources(self, db: Session, lesson_id: int, ordered_ids: List[int], current_user: User) -> List[Resource]:
        lesson = self._get_lesson(db, lesson_id)
        permission_helper.require_program_management_permission(current_user, lesson.module.program)

        siblings = crud_program_resource.get_by_parent(db, parent_id=lesson.id)
        ordered = self._apply_order(siblings, ordered_ids, "resource")
        self.audit_log.record(db, current_user, f"Reordered resources in lesson '{lesson.title}'")
        db.commit()
        return [Resource.model_validate(r) for r in ordered]

    # Learner view

    def _published_module_view(self, module: ProgramModule, lessons: List[ProgramLesson]) -> Module:
        return Module(
            id=module.id,
            program_id=module.program_id,
            title=module.title,
            description=module.description,
            order_index=module.order_index,
            is_published=module.is_published,
            created_at=module.created_at,
            updated_at=module.updated_at,
            lessons=[Lesson.model_validate(l) for l in lessons],
        )

    def get_program_learning_content(self, db: Session, program_id: int, current_user: User) -> ProgramLearningContent:
        program = self._get_program(db, program_id)
        permission_helper.require_program_view_permission(db, current_user, program)

        modules = crud_program_module.get_published_with_lessons(db, program_id=program.id)
        published_lessons = {
            m.id: sorted(
                (l for l in m.lessons if l.is_published),
                key=lambda l: (l.order_index, l.id),
            )
            for m in modules
        }
        lesson_ids = [l.id for lessons in published_lessons.values() for l in lessons]

        # Second pass: resources keyed by lesson id, merged into the lessons above.
        with_resources = {
            l.id: l for l in crud_program_lesson.get_by_ids_with_resources(db, lesson_ids=lesson_ids)
        }
        module_views = [
            self._published_module_view(m, [with_resources.get(l.id, l) for l in published_lessons[m.id]])
            for m in modules
        ]

        total_lessons = len(lesson_ids)
        total_duration = sum(
            l.duration_minutes or 0 for lessons in published_lessons.values() for l in lessons
        )
        completed_lessons = 0
        if permission_helper.is_learner(current_user):
            completed_lessons = crud_lesson_progress.count_completed(db, user_id=current_user.id, lesson_ids=lesson_ids)

        return ProgramLearningContent(
            id=program.id,
            name=program.name,
            description=program.description,
            difficulty_level=program.difficulty_level.value,
            duration=program.duration,
            price=program.price,
            instructor_id=program.instructor_id,
            instructor_name=program.instructor_name,
            instructor_avatar_url=program.instructor.avatar_url if program.instructor else None,
            category=program.category,
            location=program.location,
            created_at=program.created_at,
            modules=module_views,
            total_lessons=total_lessons,
            total_duration_minutes=total_duration,
            completed_lessons=completed_lessons,
            progress_percentage=completed_lessons / total_lessons * 100.0 if total_lessons > 0 else 0.0,
        )

content_service = ContentService(audit_log=audit_log_service)
