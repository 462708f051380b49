"""
Validation strategies

    async is_valid(candidate) -> {field: message}, empty when valid

The candidate is the hydrated input on create and the modified entity on update
"""
from collections.abc import Mapping
from typing import Any, Dict, Type
import jsonschema
import pydantic


def as_mapping(candidate: Any) -> Dict[str, Any]:
    """
    :param candidate: dict or entity
    :return: dict with the public attributes of the candidate
    """
    if isinstance(candidate, Mapping):
        return dict(candidate)
    to_dict = getattr(candidate, "to_dict", None)
    if callable(to_dict):
        return dict(to_dict())
    try:
        return {k: v for k, v in vars(candidate).items() if not k.startswith("_")}
    except TypeError:
        return {}


def error_path(path: Any, default: str = "__all__") -> str:
    parts = [str(part) for part in path]
    return ".".join(parts) if parts else default


class Validation:
    """
    No validation
    """

    async def is_valid(self, candidate: Any) -> Dict[str, Any]:
        return {}


class JSONSchemaValidation(Validation):
    """
    Validate against a JSON schema, the result maps the offending field path to the error message

    :param schema: JSON schema (dict)
    """

    def __init__(self, schema: Dict[str, Any]) -> None:
        validator_class = jsonschema.validators.validator_for(schema)
        validator_class.check_schema(schema)
        self.validator = validator_class(schema)

    async def is_valid(self, candidate: Any) -> Dict[str, Any]:
        errors: Dict[str, Any] = {}
        instance = as_mapping(candidate)
        for error in sorted(self.validator.iter_errors(instance), key=lambda e: error_path(e.absolute_path)):
            errors.setdefault(error_path(error.absolute_path), error.message)
        return errors


class PydanticValidation(Validation):
    """
    Validate with a pydantic model

    :param model: pydantic model class
    """

    def __init__(self, model: Type[pydantic.BaseModel]) -> None:
        self.model = model

    async def is_valid(self, candidate: Any) -> Dict[str, Any]:
        try:
            self.model.model_validate(as_mapping(candidate))
        except pydantic.ValidationError as exc:
            errors: Dict[str, Any] = {}
            for error in exc.errors():
                errors.setdefault(error_path(error.get("loc", ())), error.get("msg", "Invalid value"))
            return errors
        return {}
