"""
Transport independent request

The Flask and FastAPI adapters build a ResourceRequest from the incoming http request,
the resource pipeline and the strategies only see this object.
"""
from typing import Any, Dict, Mapping, Optional

HTTP_METHODS = ["GET", "POST", "PUT", "DELETE"]


class ResourceRequest:
    """
    :param method: http method
    :param id: object id from the url, None for collection requests
    :param query: query string params
    :param body: decoded request body
    :param headers: request headers (case insensitive lookups through `header()`)
    :param remote_addr: client address
    :param host: requested host
    """

    def __init__(
        self,
        method: str = "GET",
        id: Optional[str] = None,
        query: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        remote_addr: str = "",
        host: str = "",
    ) -> None:
        self.method = method.upper()
        self.id = id
        self.query: Dict[str, Any] = dict(query or {})
        self.body = body
        self.headers: Dict[str, str] = {k.lower(): v for k, v in (headers or {}).items()}
        self.remote_addr = remote_addr or ""
        self.host = host or ""
        # set by the authentication strategy
        self.user: Any = None

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name.lower(), default)

    def __repr__(self) -> str:
        return f"<ResourceRequest {self.method} id={self.id!r} query={self.query!r}>"
