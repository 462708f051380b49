# Exceptions
#
# The exceptions are classified by Resource.handle_error and turned into a response:
# - ValidationError: 400, the body is the field -> message mapping
# - StorageError with nested errors: 400, the body is the nested mapping
# - other ResourceErrors: their status_code
# - anything else: 500 with the exception message
#
from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional
import restpipe


class ResourceError(Exception):
    """
    Coded application error, raised by business logic and storage hooks
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message: Any = ""

    def __init__(self, message: Any = "", status_code: Optional[int] = None) -> None:
        """
        :param message: Message to be returned in the body
        :param status_code: HTTP Status code
        """
        Exception.__init__(self, message)
        if status_code is not None:
            self.status_code = int(status_code)
        self.message = message

    @property
    def code(self) -> int:
        return self.status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.status_code, "message": self.message}


class BadRequestError(ResourceError):
    """
    This exception is raised when the request can't be processed (client side input)
    """

    status_code = HTTPStatus.BAD_REQUEST.value

    def __init__(self, message: Any = "", status_code: int = HTTPStatus.BAD_REQUEST.value) -> None:
        super().__init__(message, status_code)
        restpipe.log.warning("BadRequestError: %s", message)


class UnAuthorizedError(ResourceError):
    """
    This exception is raised when an authorization error occured
    """

    status_code = HTTPStatus.UNAUTHORIZED.value

    def __init__(self, message: Any = "", status_code: int = HTTPStatus.UNAUTHORIZED.value) -> None:
        super().__init__(message, status_code)
        restpipe.log.info("UnAuthorizedError: %s", message)


class NotFoundError(ResourceError):
    """
    This exception is raised when an item was not found
    """

    status_code = HTTPStatus.NOT_FOUND.value

    def __init__(self, message: Any = "", status_code: int = HTTPStatus.NOT_FOUND.value) -> None:
        super().__init__(message, status_code)
        restpipe.log.info("Not found: %s", message)


class GenericError(ResourceError):
    """
    This exception is raised when an error has been detected
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value

    def __init__(self, message: Any = "", status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR.value) -> None:
        super().__init__(message, status_code)
        restpipe.log.error("Generic Error: %s", message)


class ValidationError(ResourceError):
    """
    This exception is raised when invalid input has been detected
    Always send back the errors to the client in the response
    """

    status_code = HTTPStatus.BAD_REQUEST.value

    def __init__(self, errors: Mapping[str, Any], status_code: int = HTTPStatus.BAD_REQUEST.value) -> None:
        super().__init__(dict(errors), status_code)
        self.errors = dict(errors)
        restpipe.log.warning("ValidationError: %s", self.errors)


class StorageError(ResourceError):
    """
    Raised by storage backends, `errors` holds field level details when the driver provides them
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value

    def __init__(self, message: Any = "", errors: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.errors = dict(errors) if errors else None
        restpipe.log.error("StorageError: %s", message)
