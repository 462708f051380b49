# -*- coding: utf-8 -*-
"""
    db.py: SQLAlchemy storage for resources

    class Widgets(SQLAlchemyResource):
        model = Widget
        path = "/widgets"
        fields = ["id", "name", "size"]
        filtering = {"name": ALL, "size": ["exact", "gte", "lte"]}

    Widgets(session_factory=sessionmaker(engine))

    Every storage call opens its own session in a worker thread (asyncio.to_thread),
    returned objects are detached, with their columns and the relationships of the fields tree loaded.
"""
# pylint: disable=protected-access
import asyncio
from typing import Any, Callable, Dict, List, Mapping, Optional
import sqlalchemy
from sqlalchemy import func, not_, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
import restpipe
from .errors import NotFoundError, StorageError, ValidationError
from .query import EXACT, NOR, OR, Sort
from .request import ResourceRequest
from .resource import Resource
from .trees import FieldTree

#
# filter operator -> sqla expression
#
OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "exact": lambda column, value: column == value,
    "ne": lambda column, value: column != value,
    "lt": lambda column, value: column < value,
    "lte": lambda column, value: column <= value,
    "gt": lambda column, value: column > value,
    "gte": lambda column, value: column >= value,
    "in": lambda column, value: column.in_(value),
    "contains": lambda column, value: column.contains(value, autoescape=True),
    "icontains": lambda column, value: func.lower(column).contains(str(value).lower(), autoescape=True),
    "startswith": lambda column, value: column.startswith(value, autoescape=True),
    "endswith": lambda column, value: column.endswith(value, autoescape=True),
    "isnull": lambda column, value: column.is_(None) if str(value).lower() in ("1", "true", "yes") else column.isnot(None),
}


class SQLAlchemyResource(Resource):
    """
    Resource stored in a SQLAlchemy mapped class

    :param session_factory: callable returning a new Session, eg. a sessionmaker
    """

    model: Any = None

    def __init__(self, session_factory: Callable[[], Session] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.model is None:
            raise TypeError(f"{type(self).__name__}.model is not set")
        if session_factory is None:
            raise TypeError("session_factory is required")
        self.session_factory = session_factory
        self.mapper = sqlalchemy.inspect(self.model)
        # without a fields tree all the columns are exposed
        if self.tree is None:
            self.tree = self.column_tree(self.mapper)
        else:
            self.tree = self.complete_tree(self.mapper, self.tree)
        self.projection = self.projection_class(self.tree, self.update_tree)
        self.load_options = self.loader_options(self.mapper, self.tree)

    #
    # Field trees
    #
    @staticmethod
    def column_tree(mapper: Any) -> FieldTree:
        return {attr.key: None for attr in mapper.column_attrs}

    def complete_tree(self, mapper: Any, tree: FieldTree) -> FieldTree:
        """
        relationship leaves are expanded to the columns of the related model
        """
        result: FieldTree = {}
        for field, subtree in tree.items():
            if field in mapper.relationships:
                related = mapper.relationships[field].mapper
                subtree = self.column_tree(related) if subtree is None else self.complete_tree(related, subtree)
            result[field] = subtree
        return result

    def loader_options(self, mapper: Any, tree: Optional[FieldTree]) -> List[Any]:
        """
        :return: selectinload options for the relationships in the tree, the projection runs
                 on detached instances so everything it reads has to be loaded up front
        """
        options = []
        for field, subtree in (tree or {}).items():
            if field not in mapper.relationships:
                continue
            loader = selectinload(getattr(mapper.class_, field))
            nested = self.loader_options(mapper.relationships[field].mapper, subtree)
            if nested:
                loader = loader.options(*nested)
            options.append(loader)
        return options

    def hydrate(self, obj: Any) -> Any:
        fields = super().hydrate(obj)
        if isinstance(fields, Mapping):
            unknown = {field: "Unknown field" for field in fields if field not in self.mapper.column_attrs}
            if unknown:
                raise ValidationError(unknown)
        return fields

    #
    # Query building
    #
    def get_column(self, name: str) -> Optional[Any]:
        if name not in self.mapper.column_attrs:
            restpipe.log.debug(f"{self.model.__name__} has no column {name}")
            return None
        return getattr(self.model, name)

    def coerce_value(self, column: Any, value: Any) -> Any:
        """
        convert query string values to the column python type
        """
        if isinstance(value, list):
            return [self.coerce_value(column, item) for item in value]
        if not isinstance(value, str):
            return value
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return value
        if python_type is bool:
            return value.lower() in ("1", "true", "yes")
        if python_type in (int, float):
            try:
                return python_type(value)
            except ValueError:
                return value
        return value

    def filter_expression(self, param: str, value: Any) -> Optional[Any]:
        field, operator = self.translator.split(param)
        operator = operator or EXACT
        column = self.get_column(field)
        if column is None:
            return None
        if operator not in OPERATORS:
            restpipe.log.debug(f"Unsupported filter operator {operator} on {field}")
            return None
        if operator not in ("contains", "icontains", "startswith", "endswith", "isnull"):
            value = self.coerce_value(column, value)
        return OPERATORS[operator](column, value)

    def filter_expressions(self, filters: Dict[str, Any]) -> List[Any]:
        expressions = []
        for param, value in filters.items():
            if param in (OR, NOR):
                group = [expr for sub_filter in value for expr in self.filter_expressions(sub_filter)]
                if not group:
                    continue
                expression = or_(*group)
                expressions.append(expression if param == OR else not_(expression))
                continue
            expression = self.filter_expression(param, value)
            if expression is not None:
                expressions.append(expression)
        return expressions

    def sort_expressions(self, sorts: List[Sort]) -> List[Any]:
        result = []
        for sort in sorts:
            column = self.get_column(sort.field)
            if column is None:
                continue
            result.append(column.asc() if sort.ascending else column.desc())
        return result

    def coerce_id(self, id: Any) -> Any:
        """
        convert the url id to the primary key type
        """
        pk_column = self.mapper.primary_key[0]
        try:
            python_type = pk_column.type.python_type
        except NotImplementedError:
            return id
        try:
            return python_type(id)
        except (TypeError, ValueError):
            raise NotFoundError(f"Invalid {self.model.__name__} id {id!r}")

    #
    # Blocking implementations, run in a worker thread
    #
    def _reload(self, session: Session, obj: Any) -> Any:
        # the instance is detached when the session closes, with its columns and tree relationships loaded
        identity = self.mapper.primary_key_from_instance(obj)
        return session.get(self.model, tuple(identity), options=self.load_options, populate_existing=True)

    def _get_object(self, id: Any) -> Any:
        with self.session_factory() as session:
            obj = session.get(self.model, self.coerce_id(id), options=self.load_options)
            if obj is None:
                raise NotFoundError(f"{self.model.__name__} {id} not found")
            session.expunge(obj)
            return obj

    def _get_objects(self, filters: Dict[str, Any], sorts: List[Sort], limit: int, offset: int) -> Dict[str, Any]:
        expressions = self.filter_expressions(filters)
        query = select(self.model).where(*expressions).options(*self.load_options)
        count_query = select(func.count()).select_from(self.model).where(*expressions)
        query = query.order_by(*self.sort_expressions(sorts)).limit(limit).offset(offset)
        with self.session_factory() as session:
            total_count = session.execute(count_query).scalar_one()
            objects = list(session.scalars(query))
            session.expunge_all()
        return {"meta": {"limit": limit, "offset": offset, "total_count": total_count}, "objects": objects}

    def _commit(self, session: Session) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise StorageError(f"Integrity error on {self.model.__name__}", errors={"__all__": str(exc.orig)})
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(str(exc))

    def _create_object(self, fields: Dict[str, Any]) -> Any:
        with self.session_factory() as session:
            obj = self.model(**fields)
            session.add(obj)
            self._commit(session)
            return self._reload(session, obj)

    def _update_object(self, obj: Any) -> Any:
        identity = tuple(self.mapper.primary_key_from_instance(obj))
        with self.session_factory() as session:
            persistent = session.get(self.model, identity)
            if persistent is None:
                raise NotFoundError(f"{self.model.__name__} {identity} not found")
            # columns only, the relationships follow the foreign keys
            for attr in self.mapper.column_attrs:
                setattr(persistent, attr.key, getattr(obj, attr.key))
            self._commit(session)
            return self._reload(session, persistent)

    def _delete_object(self, obj: Any) -> None:
        with self.session_factory() as session:
            session.delete(session.merge(obj))
            self._commit(session)

    #
    # Storage hooks
    #
    async def get_object(self, request: ResourceRequest, id: Any) -> Any:
        return await asyncio.to_thread(self._get_object, id)

    async def get_objects(self, request: ResourceRequest, filters: Dict[str, Any], sorts: List[Sort], limit: int, offset: int) -> Any:
        return await asyncio.to_thread(self._get_objects, filters, sorts, limit, offset)

    async def create_object(self, request: ResourceRequest, fields: Dict[str, Any]) -> Any:
        return await asyncio.to_thread(self._create_object, fields)

    async def update_object(self, request: ResourceRequest, obj: Any) -> Any:
        return await asyncio.to_thread(self._update_object, obj)

    async def delete_object(self, request: ResourceRequest, obj: Any) -> None:
        await asyncio.to_thread(self._delete_object, obj)
