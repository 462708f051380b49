"""
Authorization strategies

    async is_authorized(request) -> bool
"""
from .request import ResourceRequest


class Authorization:
    """
    No authorization, every authenticated request is allowed
    """

    async def is_authorized(self, request: ResourceRequest) -> bool:
        return True


class ReadOnlyAuthorization(Authorization):
    """
    Only allow reads
    """

    async def is_authorized(self, request: ResourceRequest) -> bool:
        return request.method == "GET"
