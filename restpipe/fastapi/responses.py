# -*- coding: utf-8 -*-

from starlette.responses import Response

from ..response import ResourceResponse


class RestPipeResponse(Response):
    """
    Starlette response carrying an already serialized ResourceResponse
    """

    @classmethod
    def from_resource_response(cls, resource_response: ResourceResponse) -> "RestPipeResponse":
        return cls(
            content=resource_response.body,
            status_code=resource_response.status,
            headers=resource_response.headers or None,
            media_type=resource_response.content_type,
        )
