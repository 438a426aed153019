import logging
from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import MultipleResultsFound, NoResultFound, OperationalError
from sqlalchemy.orm import Query, selectinload

from school.core.exceptions import ConnectivityError, EntityNotFoundError, MultipleResultsError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def run_read(read: Callable[[], R]) -> R:
    """Run a store read, turning driver connection failures into ConnectivityError."""
    try:
        return read()
    except OperationalError as e:
        logger.error(f"❌ Query failed: {e}")
        raise ConnectivityError(str(e.orig)) from e


class EntityQuery(Generic[T]):
    """
    Composable read over one entity type.

    Every builder method returns a new query; nothing touches the store
    until a materialising method (to_list, first, count, ...) is called.
    Eager-load paths are kept apart from the ORM query so aggregates
    never carry loader options for entities they do not select.
    """

    def __init__(self, query: Query, loaders: Tuple = ()):
        self._query = query
        self._loaders = loaders

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    def where(self, *criteria) -> "EntityQuery[T]":
        return EntityQuery(self._query.filter(*criteria), self._loaders)

    def order_by(self, *keys) -> "EntityQuery[T]":
        return EntityQuery(self._query.order_by(*keys), self._loaders)

    def include(self, *path) -> "EntityQuery[T]":
        """
        Eager-load a relationship path in the same logical read, e.g.
        include(Student.enrollments, Enrollment.course).
        """
        if not path:
            raise ValueError("include() needs at least one relationship")
        loader = selectinload(path[0])
        for attr in path[1:]:
            loader = loader.selectinload(attr)
        return EntityQuery(self._query, self._loaders + (loader,))

    # -------------------------------------------------------------------------
    # Materialisers
    # -------------------------------------------------------------------------

    def _entities(self) -> Query:
        return self._query.options(*self._loaders) if self._loaders else self._query

    def to_list(self) -> List[T]:
        return run_read(self._entities().all)

    def first(self) -> Optional[T]:
        return run_read(self._entities().first)

    def single(self) -> T:
        """Exactly one row; EntityNotFoundError for none, MultipleResultsError for several."""
        try:
            return run_read(self._entities().one)
        except NoResultFound:
            raise EntityNotFoundError("No matching row found")
        except MultipleResultsFound:
            raise MultipleResultsError()

    def any(self) -> bool:
        query = self._query.order_by(None)
        return bool(run_read(lambda: query.session.query(query.exists()).scalar()))

    def count(self) -> int:
        return run_read(self._query.order_by(None).count)

    def average(self, column) -> Optional[float]:
        query = self._query.order_by(None).with_entities(func.avg(column))
        value = run_read(query.scalar)
        return float(value) if value is not None else None

    def group_count(self, key) -> List[Tuple[Any, int]]:
        """(key, count) pairs ordered by key ascending."""
        query = (
            self._query.order_by(None)
            .with_entities(key, func.count())
            .group_by(key)
            .order_by(key)
        )
        return [(value, count) for value, count in run_read(query.all)]

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_list())
