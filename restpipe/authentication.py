"""
Authentication strategies

    async is_authenticated(request) -> bool
    async get_identifier(request) -> str  (used as the throttling key)
"""
from typing import Any, Callable, Mapping, Optional
from werkzeug.datastructures import Authorization as AuthorizationHeader
import restpipe
from .request import ResourceRequest


class Authentication:
    """
    No authentication, everyone is let in
    """

    async def is_authenticated(self, request: ResourceRequest) -> bool:
        return True

    async def get_identifier(self, request: ResourceRequest) -> str:
        return f"{request.remote_addr or 'noaddr'}_{request.host or 'nohost'}"


class ApiKeyAuthentication(Authentication):
    """
    Authenticate with an api key header

    :param api_keys: mapping of api key -> user
    :param header: name of the header holding the key
    """

    def __init__(self, api_keys: Mapping[str, Any], header: str = "X-Api-Key") -> None:
        self.api_keys = dict(api_keys)
        self.header = header

    async def is_authenticated(self, request: ResourceRequest) -> bool:
        key = request.header(self.header)
        if not key or key not in self.api_keys:
            restpipe.log.info(f"Invalid api key for {request}")
            return False
        request.user = self.api_keys[key]
        return True

    async def get_identifier(self, request: ResourceRequest) -> str:
        key = request.header(self.header)
        if key in self.api_keys:
            return str(self.api_keys[key])
        return await super().get_identifier(request)


class BasicAuthentication(Authentication):
    """
    HTTP basic authentication

    :param check_credentials: callable(username, password) -> bool, may be a coroutine function
    """

    def __init__(self, check_credentials: Callable[[str, str], Any]) -> None:
        self.check_credentials = check_credentials

    @staticmethod
    def parse(request: ResourceRequest) -> Optional[AuthorizationHeader]:
        auth = AuthorizationHeader.from_header(request.header("Authorization"))
        if auth is None or auth.type != "basic":
            return None
        return auth

    async def is_authenticated(self, request: ResourceRequest) -> bool:
        auth = self.parse(request)
        if auth is None:
            return False
        result = self.check_credentials(auth.username, auth.password)
        if hasattr(result, "__await__"):
            result = await result
        if result:
            request.user = auth.username
        return bool(result)

    async def get_identifier(self, request: ResourceRequest) -> str:
        auth = self.parse(request)
        if auth is not None and auth.username:
            return auth.username
        return await super().get_identifier(request)
