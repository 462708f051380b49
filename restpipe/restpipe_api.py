# flask_restful API subclass
#
# Flask views are synchronous, the resource coroutines run on a dedicated event loop thread.
# Background tasks (cache writes) keep running on that loop after the view has returned.
#
import asyncio
import threading
from typing import Any, Awaitable, Callable, Optional
import flask_restful
from flask import Response, request
from flask.app import Flask
import restpipe
from .request import ResourceRequest
from .resource import Resource
from .response import ResourceResponse


class EventLoopThread:
    """
    An asyncio event loop running forever in a daemon thread
    """

    def __init__(self, name: str = "restpipe-loop") -> None:
        self.loop = asyncio.new_event_loop()
        self.thread = threading.Thread(target=self._run, name=name, daemon=True)
        self.thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def run(self, coro: Awaitable, timeout: Optional[float] = None) -> Any:
        """
        Run the coroutine on the loop and block until it's done
        """
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def stop(self) -> None:
        if self.loop.is_running():
            self.loop.call_soon_threadsafe(self.loop.stop)
            self.thread.join()


def build_request(object_id: Optional[str] = None) -> ResourceRequest:
    """
    :param object_id: object id from the url
    :return: ResourceRequest for the current flask request
    """
    body = None
    if request.method in ("POST", "PUT"):
        body = request.get_json(silent=True)
    return ResourceRequest(
        method=request.method,
        id=object_id,
        query=request.args.to_dict(),
        body=body,
        headers=dict(request.headers),
        remote_addr=request.remote_addr or "",
        host=request.host,
    )


def make_response(resource_response: ResourceResponse) -> Response:
    response = Response(resource_response.body, status=resource_response.status, content_type=resource_response.content_type)
    response.headers.update(resource_response.headers)
    return response


class RestPipeRestAPI(flask_restful.Resource):
    """
    flask_restful resource delegating to a restpipe Resource, subclassed for every exposed resource
    """

    resource: Resource = None
    runner: EventLoopThread = None

    def _call(self, operation: Callable[[ResourceRequest], Awaitable[ResourceResponse]], object_id: Optional[str]) -> Response:
        result = self.runner.run(operation(build_request(object_id)))
        return make_response(result)

    def get(self, object_id: Optional[str] = None) -> Response:
        if object_id is None:
            return self._call(self.resource.index, None)
        return self._call(self.resource.show, object_id)

    def post(self) -> Response:
        return self._call(self.resource.create, None)

    def put(self, object_id: str) -> Response:
        return self._call(self.resource.update, object_id)

    def delete(self, object_id: str) -> Response:
        return self._call(self.resource.destroy, object_id)


class RestPipeAPI(flask_restful.Api):
    """
    Subclass of the flask_restful API class where we add the expose method
    this method creates the API endpoints for a restpipe Resource
    """

    def __init__(self, app: Flask, prefix: str = "", runner: Optional[EventLoopThread] = None, **kwargs: Any) -> None:
        """
        :param app: Flask app
        :param prefix: url prefix
        :param runner: event loop thread running the resource coroutines
        :param kwargs: RestPipe configuration settings
        """
        restpipe.RestPipe(app, **kwargs)
        super().__init__(app, prefix=prefix)
        app.url_map.strict_slashes = False
        self.runner = runner or EventLoopThread()

    def expose(self, *resources: Resource) -> None:
        for resource in resources:
            self.expose_resource(resource)

    def expose_resource(self, resource: Resource) -> None:
        """
        creates a class of the form

        class <Resource>_API(RestPipeRestAPI):
            resource = resource

        and adds it to /<path>/ and /<path>/<object_id>
        """
        name = resource.path.strip("/").replace("/", "_") or type(resource).__name__
        api_class = type(f"{name}_API", (RestPipeRestAPI,), {"resource": resource, "runner": self.runner})

        url = f"{resource.path}/"
        restpipe.log.info(f"Exposing {resource} on {url}")
        self.add_resource(api_class, url, endpoint=f"api.{name}", methods=["GET", "POST"])

        url = f"{resource.path}/<string:object_id>"
        restpipe.log.info(f"Exposing {resource} instances on {url}")
        self.add_resource(api_class, url, endpoint=f"api.{name}Id", methods=["GET", "PUT", "DELETE"])
