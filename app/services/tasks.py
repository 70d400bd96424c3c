"""
Servicio de tareas: CRUD, listado filtrado y transiciones de estado.

Todas las operaciones reciben el id del usuario autenticado y solo ven sus
propias tareas. Una tarea de otro usuario se reporta como inexistente.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlmodel import Session, select

from app.core.errors import BadRequestError, NotFoundError
from app.models.task import Task, TaskPriority, TaskStatus
from app.schemas.tasks import TaskSort

NON_NULLABLE_FIELDS = ("title", "description", "priority", "status")


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Las fechas se guardan en UTC sin tzinfo, igual que created_at"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def apply_status(task: Task, status: TaskStatus) -> None:
    """completed_at se fija solo al pasar a DONE y se limpia en cualquier otro estado"""
    task.status = status
    task.completed_at = datetime.utcnow() if status == TaskStatus.DONE else None


class TaskService:
    @staticmethod
    def create_task(
        session: Session,
        *,
        user_id: int,
        title: str,
        description: str = "",
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: Optional[datetime] = None,
    ) -> Task:
        task = Task(
            user_id=user_id,
            title=title,
            description=description,
            priority=priority,
            status=TaskStatus.PENDING,
            due_date=_to_naive_utc(due_date),
            completed_at=None,
        )
        session.add(task)
        session.commit()
        session.refresh(task)
        return task

    @staticmethod
    def list_tasks(
        session: Session,
        *,
        user_id: int,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        due_date: Optional[date] = None,
        sort: TaskSort = TaskSort.CREATED_AT,
    ) -> List[Task]:
        """Tareas del usuario que cumplen todos los filtros, en orden descendente"""
        statement = select(Task).where(Task.user_id == user_id)

        if status is not None:
            statement = statement.where(Task.status == status)
        if priority is not None:
            statement = statement.where(Task.priority == priority)
        if due_date is not None:
            day_start = datetime.combine(due_date, time.min)
            statement = statement.where(
                Task.due_date >= day_start,
                Task.due_date < day_start + timedelta(days=1),
            )

        if sort == TaskSort.DUE_DATE:
            statement = statement.order_by(Task.due_date.desc().nulls_last(), Task.id.desc())
        else:
            statement = statement.order_by(Task.created_at.desc(), Task.id.desc())

        return list(session.exec(statement).all())

    @staticmethod
    def get_task(session: Session, *, user_id: int, task_id: int) -> Task:
        task = session.exec(
            select(Task).where(Task.id == task_id, Task.user_id == user_id)
        ).first()
        if not task:
            raise NotFoundError("Tarea no encontrada")
        return task

    @staticmethod
    def _save(session: Session, task: Task) -> Task:
        task.updated_at = datetime.utcnow()
        session.add(task)
        session.commit()
        session.refresh(task)
        return task

    @staticmethod
    def replace_task(
        session: Session,
        *,
        user_id: int,
        task_id: int,
        title: str,
        description: str,
        priority: TaskPriority,
        due_date: Optional[datetime],
    ) -> Task:
        """Sobrescribir los cuatro campos principales (el estado no cambia)"""
        task = TaskService.get_task(session, user_id=user_id, task_id=task_id)
        task.title = title
        task.description = description
        task.priority = priority
        task.due_date = _to_naive_utc(due_date)
        return TaskService._save(session, task)

    @staticmethod
    def patch_task(session: Session, *, user_id: int, task_id: int, changes: dict) -> Task:
        """
        Aplicar solo los campos presentes en `changes`.

        `changes` debe venir de model_dump(exclude_unset=True) para distinguir
        "omitido" de "null explícito".
        """
        for field in NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise BadRequestError(f"El campo '{field}' no puede ser null")

        task = TaskService.get_task(session, user_id=user_id, task_id=task_id)

        if "title" in changes:
            task.title = changes["title"]
        if "description" in changes:
            task.description = changes["description"]
        if "priority" in changes:
            task.priority = changes["priority"]
        if "due_date" in changes:
            task.due_date = _to_naive_utc(changes["due_date"])
        if "status" in changes:
            apply_status(task, changes["status"])

        return TaskService._save(session, task)

    @staticmethod
    def set_status(session: Session, *, user_id: int, task_id: int, status: TaskStatus) -> Task:
        task = TaskService.get_task(session, user_id=user_id, task_id=task_id)
        apply_status(task, status)
        return TaskService._save(session, task)

    @staticmethod
    def complete_task(session: Session, *, user_id: int, task_id: int) -> Task:
        return TaskService.set_status(session, user_id=user_id, task_id=task_id, status=TaskStatus.DONE)
