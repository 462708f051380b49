# Response class
from http import HTTPStatus
from typing import Any, Dict, Optional
from .json_encoder import dumps

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


class ResourceResponse:
    """
    Transport independent response, the adapters copy status, body and content type

    :param status: http status code
    :param data: the payload before serialization
    :param body: serialized payload
    :param content_type: body content type
    """

    def __init__(self, status: int, data: Any = None, body: bytes = b"", content_type: str = JSON_CONTENT_TYPE) -> None:
        self.status = int(status)
        self.data = data
        self.body = body
        self.content_type = content_type
        self.headers: Dict[str, str] = {}

    @classmethod
    def json(cls, data: Any, status: int = HTTPStatus.OK.value) -> "ResourceResponse":
        """
        A None payload and 204 (No Content) responses have an empty body
        """
        body = b""
        if data is not None and status != HTTPStatus.NO_CONTENT.value:
            body = dumps(data).encode("utf-8")
        return cls(status, data=data, body=body, content_type=JSON_CONTENT_TYPE)

    @classmethod
    def text(cls, message: Optional[Any], status: int) -> "ResourceResponse":
        text = "" if message is None else str(message)
        return cls(status, data=message, body=text.encode("utf-8"), content_type=TEXT_CONTENT_TYPE)

    @property
    def text_body(self) -> str:
        return self.body.decode("utf-8")

    def __repr__(self) -> str:
        return f"<ResourceResponse {self.status} {self.body[:80]!r}>"
