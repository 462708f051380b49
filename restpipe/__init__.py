# flake8: noqa: F401
#
# restpipe: CRUD resources served through a fixed pipeline
# allowed method -> authentication -> throttling -> authorization -> operation -> dehydrate -> response
#
from .restpipe_init import log, RestPipe
from .errors import (
    ResourceError,
    BadRequestError,
    UnAuthorizedError,
    NotFoundError,
    GenericError,
    ValidationError,
    StorageError,
)
from .trees import build_tree
from .projection import Projection
from .query import QueryTranslator, Sort, Direction, ALL
from .cache import Cache, MemoryCache, BackgroundTasks, build_cache_key
from .authentication import Authentication, ApiKeyAuthentication, BasicAuthentication
from .authorization import Authorization, ReadOnlyAuthorization
from .throttling import Throttling, CacheThrottling
from .validation import Validation, JSONSchemaValidation, PydanticValidation
from .request import ResourceRequest
from .response import ResourceResponse
from .resource import Resource
from .db import SQLAlchemyResource
from .restpipe_api import RestPipeAPI
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    "log",
    "RestPipe",
    # resources:
    "Resource",
    "SQLAlchemyResource",
    "RestPipeAPI",
    # pipeline parts:
    "build_tree",
    "Projection",
    "QueryTranslator",
    "Sort",
    "Direction",
    "ALL",
    "build_cache_key",
    "BackgroundTasks",
    # strategies:
    "Authentication",
    "ApiKeyAuthentication",
    "BasicAuthentication",
    "Authorization",
    "ReadOnlyAuthorization",
    "Throttling",
    "CacheThrottling",
    "Validation",
    "JSONSchemaValidation",
    "PydanticValidation",
    "Cache",
    "MemoryCache",
    # request/response
    "ResourceRequest",
    "ResourceResponse",
    # Errors:
    "ResourceError",
    "BadRequestError",
    "UnAuthorizedError",
    "NotFoundError",
    "GenericError",
    "ValidationError",
    "StorageError",
)
