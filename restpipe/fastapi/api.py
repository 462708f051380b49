# -*- coding: utf-8 -*-

import json
from typing import Any, Awaitable, Callable, List, Optional

from fastapi import APIRouter, FastAPI, Request

import restpipe
from ..request import ResourceRequest
from ..resource import Resource
from ..response import ResourceResponse
from .responses import RestPipeResponse

Operation = Callable[[ResourceRequest], Awaitable[ResourceResponse]]


async def build_request(request: Request, object_id: Optional[str] = None) -> ResourceRequest:
    """
    :param request: starlette request
    :param object_id: object id from the url
    :return: ResourceRequest
    """
    body: Any = None
    if request.method in ("POST", "PUT"):
        raw = await request.body()
        if raw:
            try:
                body = json.loads(raw)
            except ValueError:
                restpipe.log.warning(f"Invalid JSON body for {request.url}")
                body = None
    client = request.client
    return ResourceRequest(
        method=request.method,
        id=object_id,
        query=dict(request.query_params),
        body=body,
        headers=dict(request.headers),
        remote_addr=client.host if client else "",
        host=request.headers.get("host", ""),
    )


class RestPipeFastAPI:
    """
    Mounts restpipe resources on a FastAPI app, the resource coroutines run on the server event loop
    """

    def __init__(self, app: FastAPI, prefix: str = "") -> None:
        self.app = app
        self.prefix = prefix
        self.resources: List[Resource] = []

    @staticmethod
    def _with_slash_parity(path: str) -> List[str]:
        if path.endswith("/"):
            path = path.rstrip("/")
        return [path, path + "/"]

    def _add_route_with_slash_parity(self, router: APIRouter, path: str, endpoint: Any, methods: List[str], operation_id: str) -> None:
        for method in methods:
            method_name = str(method).upper()
            for idx, variant in enumerate(self._with_slash_parity(path)):
                router.add_api_route(
                    variant,
                    endpoint,
                    methods=[method_name],
                    response_class=RestPipeResponse,
                    operation_id=f"{operation_id}_{method_name.lower()}" if idx == 0 else None,
                    include_in_schema=idx == 0,
                )

    @staticmethod
    def _collection_handler(operation: Operation):
        async def handler(request: Request) -> RestPipeResponse:
            result = await operation(await build_request(request))
            return RestPipeResponse.from_resource_response(result)

        return handler

    @staticmethod
    def _instance_handler(operation: Operation):
        async def handler(object_id: str, request: Request) -> RestPipeResponse:
            result = await operation(await build_request(request, object_id))
            return RestPipeResponse.from_resource_response(result)

        return handler

    def expose(self, *resources: Resource) -> None:
        for resource in resources:
            self.expose_resource(resource)

    def expose_resource(self, resource: Resource) -> None:
        """
        add the resource operations to /<path>/ and /<path>/{object_id}
        """
        name = resource.path.strip("/").replace("/", "_") or type(resource).__name__
        tag = name or type(resource).__name__
        router = APIRouter(prefix=self.prefix, tags=[tag])

        url = resource.path
        restpipe.log.info(f"Exposing {resource} on {url}")
        self._add_route_with_slash_parity(router, url, self._collection_handler(resource.index), ["GET"], f"{name}_index")
        self._add_route_with_slash_parity(router, url, self._collection_handler(resource.create), ["POST"], f"{name}_create")

        url = f"{resource.path}/{{object_id}}"
        restpipe.log.info(f"Exposing {resource} instances on {url}")
        self._add_route_with_slash_parity(router, url, self._instance_handler(resource.show), ["GET"], f"{name}_show")
        self._add_route_with_slash_parity(router, url, self._instance_handler(resource.update), ["PUT"], f"{name}_update")
        self._add_route_with_slash_parity(router, url, self._instance_handler(resource.destroy), ["DELETE"], f"{name}_destroy")

        self.app.include_router(router)
        self.resources.append(resource)
