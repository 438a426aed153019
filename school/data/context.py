import enum
import logging
from typing import Generic, Iterable, List, NamedTuple, Optional, Type, TypeVar

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, with_parent
from sqlalchemy.orm.attributes import set_committed_value

from school.core.database import SessionLocal
from school.core.exceptions import (
    ConnectivityError,
    ConstraintViolationError,
    EntityValidationError,
)
from school.core.validation import validate_entity
from school.data.query import EntityQuery, run_read
from school.models.course import Course
from school.models.enrollment import Enrollment
from school.models.student import Student

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityState(str, enum.Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


class EntityEntry(NamedTuple):
    entity: object
    state: EntityState


class EntitySet(Generic[T]):
    """One table's worth of tracked entities inside a SchoolContext."""

    def __init__(self, context: "SchoolContext", model: Type[T]):
        self._context = context
        self._model = model

    def query(self) -> EntityQuery[T]:
        return EntityQuery(self._context.session.query(self._model))

    def where(self, *criteria) -> EntityQuery[T]:
        return self.query().where(*criteria)

    def order_by(self, *keys) -> EntityQuery[T]:
        return self.query().order_by(*keys)

    def include(self, *path) -> EntityQuery[T]:
        return self.query().include(*path)

    def to_list(self) -> List[T]:
        return self.query().to_list()

    def count(self) -> int:
        return self.query().count()

    def find(self, entity_id: int) -> Optional[T]:
        """Look in the identity map first, then the store."""
        return run_read(lambda: self._context.session.get(self._model, entity_id))

    def add(self, entity: T) -> T:
        self._context.session.add(entity)
        return entity

    def add_range(self, entities: Iterable[T]) -> None:
        for entity in entities:
            self.add(entity)

    def remove(self, entity: T) -> None:
        self._context.stage_delete(entity)

    def remove_range(self, entities: Iterable[T]) -> None:
        for entity in list(entities):
            self.remove(entity)


class SchoolContext:
    """
    One unit of work against the school database.

    Entities read through the collections or passed to add() are tracked;
    changing a tracked entity's fields is picked up by save_changes()
    without any extra call. Not safe for concurrent use: open one context
    per caller.

    Usage:
        with SchoolContext() as db:
            db.students.add(Student(...))
            db.save_changes()
    """

    # Foreign key and relationship on Enrollment that point at each parent type
    DEPENDENT_KEYS = {
        Student: (Enrollment.student_id, "student"),
        Course: (Enrollment.course_id, "course"),
    }

    def __init__(self, bind: Engine = None):
        self.session: Session = SessionLocal(bind=bind) if bind is not None else SessionLocal()
        self.students: EntitySet[Student] = EntitySet(self, Student)
        self.courses: EntitySet[Course] = EntitySet(self, Course)
        self.enrollments: EntitySet[Enrollment] = EntitySet(self, Enrollment)

    def __enter__(self) -> "SchoolContext":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        """Release the connection and forget every tracked entity."""
        self.session.close()

    # -------------------------------------------------------------------------
    # Change tracking
    # -------------------------------------------------------------------------

    def entries(self) -> List[EntityEntry]:
        """Every tracked entity with its pending state."""
        session = self.session
        result = [EntityEntry(obj, EntityState.ADDED) for obj in session.new]
        result += [EntityEntry(obj, EntityState.DELETED) for obj in session.deleted]

        for obj in session.identity_map.values():
            if obj in session.deleted:
                continue
            if session.is_modified(obj, include_collections=False):
                result.append(EntityEntry(obj, EntityState.MODIFIED))
            else:
                result.append(EntityEntry(obj, EntityState.UNCHANGED))
        return result

    def has_changes(self) -> bool:
        return any(entry.state is not EntityState.UNCHANGED for entry in self.entries())

    def stage_delete(self, entity) -> None:
        """
        Stage an entity for deletion together with the enrollments that
        depend on it. Removing a never-saved entity just stops tracking it.
        Enrollments added in this unit of work and pointing at the entity
        are dropped as well.
        """
        state = inspect(entity)
        if state.pending:
            self.session.expunge(entity)
            return

        dependent = self.DEPENDENT_KEYS.get(type(entity))
        if dependent is not None:
            key, relation = dependent
            for pending in self._pending_dependents(entity, key.key, relation):
                if inspect(pending).attrs[relation].loaded_value is entity:
                    # Also takes it off the parent's unloaded collection
                    setattr(pending, relation, None)
                self.session.expunge(pending)
                logger.debug(f"Dropped unsaved {pending!r} of {entity!r}")

            dependents = self.enrollments.where(key == entity.id).to_list()
            for row in dependents:
                self.session.delete(row)
            if dependents:
                logger.debug(f"Staged {len(dependents)} dependent enrollment(s) of {entity!r}")

        self.session.delete(entity)

    def _pending_dependents(self, entity, key: str, relation: str) -> List[Enrollment]:
        found = []
        for obj in self.session.new:
            if not isinstance(obj, Enrollment):
                continue
            parent = inspect(obj).attrs[relation].loaded_value
            if getattr(obj, key) == entity.id or parent is entity:
                found.append(obj)
        return found

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------

    def load(self, entity, relation: str):
        """
        Fetch one relationship of a tracked entity on demand and return it.
        Navigation attributes never load themselves, so this is the only
        way besides include() to read an unloaded relation.
        """
        attr = getattr(type(entity), relation)
        prop = attr.property
        query = self.session.query(prop.mapper.class_).filter(with_parent(entity, attr))
        rows = run_read(query.all)

        if prop.uselist:
            set_committed_value(entity, relation, rows)
        else:
            set_committed_value(entity, relation, rows[0] if rows else None)
        return getattr(entity, relation)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _validate(self, entries: List[EntityEntry]) -> None:
        issues = {}
        for position, (entity, state) in enumerate(entries):
            if state not in (EntityState.ADDED, EntityState.MODIFIED):
                continue
            label = entity.id if entity.id is not None else f"new{position}"
            for issue in validate_entity(entity):
                issues[f"{type(entity).__name__}[{label}].{issue.field}"] = issue.message

        if issues:
            logger.warning(f"Rejected save: {len(issues)} validation error(s)")
            raise EntityValidationError(
                f"{len(issues)} validation error(s); nothing was saved",
                details=issues
            )

    def save_changes(self) -> int:
        """
        Write every staged insert, update and delete in one transaction.

        Returns the number of entities written. Either all changes land
        or none do: validation errors are raised before anything is sent,
        store rejections roll the whole unit back.
        """
        changed = [entry for entry in self.entries() if entry.state is not EntityState.UNCHANGED]
        self._validate(changed)

        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.error(f"❌ Save rolled back: {e.orig}")
            raise ConstraintViolationError(str(e.orig)) from e
        except OperationalError as e:
            self.session.rollback()
            logger.error(f"❌ Save failed: {e.orig}")
            raise ConnectivityError(str(e.orig)) from e

        logger.info(f"Saved {len(changed)} change(s)")
        return len(changed)

    def discard_changes(self) -> None:
        """Drop every staged change."""
        self.session.rollback()
