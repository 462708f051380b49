# -*- coding: utf-8 -*-
"""
    resource.py: the Resource base class

    A resource exposes five operations, each of them runs through `dispatch`:

    show     GET    /<path>/<id>
    index    GET    /<path>/
    create   POST   /<path>/
    update   PUT    /<path>/<id>
    destroy  DELETE /<path>/<id>

    dispatch: allowed method -> authentication -> throttling -> authorization -> operation
              -> dehydrate -> response

    Storage is left to subclasses, they implement get_object, get_objects, create_object,
    update_object and delete_object.
"""
# pylint: disable=too-many-instance-attributes,broad-except
import abc
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple
import restpipe
from .authentication import Authentication
from .authorization import Authorization
from .cache import BackgroundTasks, Cache, build_cache_key
from .config import get_config, get_int_config
from .errors import BadRequestError, ResourceError, StorageError, ValidationError
from .projection import Projection, read_field, write_field
from .query import QueryTranslator, Sort
from .request import ResourceRequest
from .response import ResourceResponse
from .throttling import Throttling
from .trees import build_tree
from .validation import Validation

Operation = Callable[[ResourceRequest], Awaitable[Any]]
Guard = Callable[[ResourceRequest], Awaitable[bool]]


class Resource(abc.ABC):
    """
    Base class for CRUD resources

    The configuration can be set as class attributes or passed to the constructor:

        class Widgets(SQLAlchemyResource):
            path = "/widgets"
            allowed_methods = ["get", "post", "put", "delete"]
            fields = ["id", "name", {"owner": ["name"]}]
            update_fields = ["name"]
            filtering = {"name": ALL, "size": ["gte", "lte"]}
    """

    # url path of the resource, also the cache key namespace
    path = ""
    # allowed methods, can contain "get", "post", "put", "delete"
    allowed_methods: Any = ["get"]
    # exposed fields (list of names or nested mapping), None exposes everything
    fields: Any = None
    # fields that can be created/updated, None allows everything
    update_fields: Any = None
    # fields upon which filtering is allowed, mapped to the allowed operators
    filtering: Mapping[str, Any] = {}
    # default query limit and max results to return, fall back to DEFAULT_LIMIT and MAX_LIMIT
    default_limit: Optional[int] = None
    max_limit: Optional[int] = None
    # object id attribute, used for the cache key of new objects
    id_field = "id"
    status_codes: Dict[str, int] = {
        "get": HTTPStatus.OK.value,
        "post": HTTPStatus.CREATED.value,
        "put": HTTPStatus.NO_CONTENT.value,
        "delete": HTTPStatus.NON_AUTHORITATIVE_INFORMATION.value,
    }
    projection_class = Projection
    translator_class = QueryTranslator

    def __init__(
        self,
        authentication: Optional[Authentication] = None,
        authorization: Optional[Authorization] = None,
        cache: Optional[Cache] = None,
        validation: Optional[Validation] = None,
        throttling: Optional[Throttling] = None,
        **settings: Any,
    ) -> None:
        """
        :param authentication: authentication strategy (default: no authentication)
        :param authorization: authorization strategy (default: no authorization)
        :param cache: cache (default: no cache)
        :param validation: validation strategy (default: no validation)
        :param throttling: throttling strategy (default: no throttling)
        :param settings: overrides of the class configuration attributes
        """
        for name, value in settings.items():
            if name.startswith("_") or not hasattr(type(self), name) or callable(getattr(type(self), name)):
                raise TypeError(f"{type(self).__name__} has no setting {name!r}")
            setattr(self, name, value)

        self.authentication = authentication if authentication is not None else Authentication()
        self.authorization = authorization if authorization is not None else Authorization()
        self.cache = cache if cache is not None else Cache()
        self.validation = validation if validation is not None else Validation()
        self.throttling = throttling if throttling is not None else Throttling()

        # derived configuration
        methods_tree = build_tree(self.allowed_methods) or {}
        self.allowed_methods_tree = {method.lower(): None for method in methods_tree}
        self.tree = build_tree(self.fields)
        self.update_tree = build_tree(self.update_fields)
        self.projection = self.projection_class(self.tree, self.update_tree)
        self.translator = self.translator_class(self.filtering, get_config("FILTER_SEPARATOR") or "__")
        self.background = BackgroundTasks()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.path}>"

    #
    # Operations
    #
    async def show(self, request: ResourceRequest) -> ResourceResponse:
        """
        called on GET - /<path>/<id>
        """
        return await self.dispatch(request, self._show)

    async def index(self, request: ResourceRequest) -> ResourceResponse:
        """
        called on GET - /<path>/
        """
        return await self.dispatch(request, self._index)

    async def create(self, request: ResourceRequest) -> ResourceResponse:
        """
        called on POST - /<path>/
        """
        return await self.dispatch(request, self._create)

    async def update(self, request: ResourceRequest) -> ResourceResponse:
        """
        called on PUT - /<path>/<id>
        """
        return await self.dispatch(request, self._update)

    async def destroy(self, request: ResourceRequest) -> ResourceResponse:
        """
        called on DELETE - /<path>/<id>
        """
        return await self.dispatch(request, self._destroy)

    async def _show(self, request: ResourceRequest) -> Any:
        return await self.cached_get_object(request, request.id)

    async def _index(self, request: ResourceRequest) -> Any:
        query = request.query
        filters = self.translator.build_filters(query)
        sorts = self.translator.build_sorts(query)
        limit, offset = self.translator.build_page(query, self.get_default_limit(), self.get_max_limit())
        cache_key = self.build_cache_key(query)
        return await self.cache_aside(cache_key, lambda: self.get_objects(request, filters, sorts, limit, offset))

    async def _create(self, request: ResourceRequest) -> Any:
        # get request fields, parse & limit them
        fields = self.hydrate(self.get_payload(request))
        await self.validate(fields)
        obj = await self.create_object(request, fields)
        # save to cache, no need to wait for it
        cache_key = self.build_cache_key(read_field(obj, self.id_field))
        self.background.spawn(self.cache.set(cache_key, obj), f"cache set {cache_key}")
        return obj

    async def _update(self, request: ResourceRequest) -> Any:
        obj = await self.get_object(request, request.id)
        fields = self.hydrate(self.get_payload(request))
        for field, value in fields.items():
            write_field(obj, field, value)
        await self.validate(obj)
        obj = await self.update_object(request, obj)
        # save to cache, this time wait for it
        await self.cache.set(self.build_cache_key(request.id), obj)
        return obj

    async def _destroy(self, request: ResourceRequest) -> Any:
        obj = await self.get_object(request, request.id)
        # the cache entry is cleared alongside the delete, not after it
        cache_key = self.build_cache_key(request.id)
        self.background.spawn(self.cache.set(cache_key, None), f"cache delete {cache_key}")
        return await self.delete_object(request, obj)

    #
    # Dispatching
    #
    def guards(self) -> List[Tuple[str, Guard]]:
        """
        :return: the ordered (name, check) list evaluated after the method check
        """
        return [
            ("authentication", self.check_authentication),
            ("throttling", self.check_throttling),
            ("authorization", self.check_authorization),
        ]

    def is_method_allowed(self, request: ResourceRequest) -> bool:
        return request.method.lower() in self.allowed_methods_tree

    async def check_authentication(self, request: ResourceRequest) -> bool:
        return bool(await self.authentication.is_authenticated(request))

    async def check_throttling(self, request: ResourceRequest) -> bool:
        identifier = await self.authentication.get_identifier(request)
        return not await self.throttling.throttle(identifier)

    async def check_authorization(self, request: ResourceRequest) -> bool:
        return bool(await self.authorization.is_authorized(request))

    async def dispatch(self, request: ResourceRequest, operation: Operation) -> ResourceResponse:
        """
        performs all the checks before calling `operation` and turns its result into a response

        :param request: ResourceRequest
        :param operation: coroutine function performing the business logic
        :return: ResourceResponse
        """
        method = request.method.lower()
        if not self.is_method_allowed(request):
            restpipe.log.info(f"{self}: method {request.method} not allowed")
            return self.unauthorized()

        for name, check in self.guards():
            try:
                passed = await check(request)
            except Exception as exc:
                restpipe.log.error(f"{self}: {name} check failed: {exc}", exc_info=exc)
                return self.internal_error(exc)
            if not passed:
                restpipe.log.info(f"{self}: {name} check rejected {request}")
                return self.unauthorized()

        try:
            result = await operation(request)
            data = self.full_dehydrate(result)
        except Exception as exc:
            return self.handle_error(exc)

        return self.serialize(request, data, self.status_codes.get(method, HTTPStatus.OK.value))

    def handle_error(self, exc: Exception) -> ResourceResponse:
        """
        Classify an exception raised by an operation

        :param exc: the exception
        :return: error response
        """
        if isinstance(exc, ValidationError):
            return self.bad_request(exc.errors)
        if isinstance(exc, StorageError) and exc.errors:
            # driver errors with field details are reported as a bad request only
            restpipe.log.error(f"{self}: storage error {exc.message}: {exc.errors}")
            return self.bad_request(exc.errors)
        if isinstance(exc, ResourceError):
            code = exc.status_code
            if code == HTTPStatus.INTERNAL_SERVER_ERROR:
                restpipe.log.error(f"{self}: {exc.message}", exc_info=exc)
                return self.internal_error(exc)
            if code == HTTPStatus.BAD_REQUEST:
                return self.bad_request(exc.to_dict())
            if code == HTTPStatus.UNAUTHORIZED:
                return self.unauthorized(exc.message)
            return ResourceResponse.json(exc.message, code)
        restpipe.log.error(f"{self}: unhandled {type(exc).__name__}: {exc}", exc_info=exc)
        return self.internal_error(exc)

    #
    # Responses
    #
    def serialize(self, request: ResourceRequest, data: Any, status: int) -> ResourceResponse:
        """
        converts the dehydrated response object to the response
        """
        return ResourceResponse.json(data, status)

    @staticmethod
    def unauthorized(message: Optional[Any] = None) -> ResourceResponse:
        return ResourceResponse.text(message, HTTPStatus.UNAUTHORIZED.value)

    @staticmethod
    def bad_request(data: Any) -> ResourceResponse:
        return ResourceResponse.json(data, HTTPStatus.BAD_REQUEST.value)

    @staticmethod
    def internal_error(exc: Exception) -> ResourceResponse:
        message = getattr(exc, "message", None)
        if message is None or message == "":
            message = str(exc)
        return ResourceResponse.text(message, HTTPStatus.INTERNAL_SERVER_ERROR.value)

    #
    # Helpers
    #
    def get_default_limit(self) -> int:
        return self.default_limit or get_int_config("DEFAULT_LIMIT")

    def get_max_limit(self) -> int:
        return self.max_limit or get_int_config("MAX_LIMIT")

    def build_cache_key(self, id_query: Any) -> str:
        return build_cache_key(self.path, id_query)

    @staticmethod
    def get_payload(request: ResourceRequest) -> Dict[str, Any]:
        if not isinstance(request.body, Mapping):
            raise BadRequestError(f"Invalid JSON payload: {request.body!r}")
        return dict(request.body)

    def full_dehydrate(self, obj: Any) -> Any:
        return self.projection.full_dehydrate(obj)

    def dehydrate(self, obj: Any) -> Any:
        return self.projection.dehydrate(obj)

    def hydrate(self, obj: Any) -> Any:
        return self.projection.hydrate(obj)

    async def validate(self, candidate: Any) -> None:
        errors = await self.validation.is_valid(candidate)
        if errors:
            raise ValidationError(errors)

    async def cache_aside(self, cache_key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached value for `cache_key`, on a miss fetch it and cache it in the background

        :param cache_key: cache key
        :param fetch: coroutine function returning the value
        :return: cached or fetched value
        """
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached
        value = await fetch()
        self.background.spawn(self.cache.set(cache_key, value), f"cache set {cache_key}")
        return value

    async def cached_get_object(self, request: ResourceRequest, id: Any) -> Any:
        """
        get object with cache wrapping
        """
        return await self.cache_aside(self.build_cache_key(id), lambda: self.get_object(request, id))

    #
    # Storage, to be implemented by subclasses
    #
    @abc.abstractmethod
    async def get_object(self, request: ResourceRequest, id: Any) -> Any:
        """
        single object getter, called on show, update and destroy
        raise NotFoundError when the object doesn't exist
        """
        raise NotImplementedError("get_object")

    @abc.abstractmethod
    async def get_objects(self, request: ResourceRequest, filters: Dict[str, Any], sorts: List[Sort], limit: int, offset: int) -> Any:
        """
        multiple object getter, called on index
        :return: list of objects or a {"meta": ..., "objects": [...]} envelope
        """
        raise NotImplementedError("get_objects")

    @abc.abstractmethod
    async def create_object(self, request: ResourceRequest, fields: Dict[str, Any]) -> Any:
        """
        save a new object with fields, called on create
        """
        raise NotImplementedError("create_object")

    @abc.abstractmethod
    async def update_object(self, request: ResourceRequest, obj: Any) -> Any:
        """
        save an existing (modified) object, called on update
        """
        raise NotImplementedError("update_object")

    @abc.abstractmethod
    async def delete_object(self, request: ResourceRequest, obj: Any) -> Any:
        """
        delete the object, called on destroy
        """
        raise NotImplementedError("delete_object")
