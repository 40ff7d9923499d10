"""Shared Pydantic schema bases."""
from typing import Annotated, Mapping, Optional, Union
from pydantic import AfterValidator, BaseModel, ConfigDict, HttpUrl, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from jobly.errors import BadRequestError, error_messages

_HTTP_URL = TypeAdapter(HttpUrl)


class CamelModel(BaseModel):
    """Snake-case fields in Python, camelCase keys on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    """Request bodies reject fields they do not declare."""
    model_config = ConfigDict(extra="forbid")


def check_url(value):
    """Validate a URL but keep the caller's spelling (HttpUrl would normalize it)."""
    if value is not None:
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError("must be a valid URL")
    return value


OptionalUrl = Annotated[Optional[str], AfterValidator(check_url)]


class DeletedResponse(BaseModel):
    """Response after deleting a resource."""
    deleted: Union[int, str]


def validate_filters(query_params: Mapping[str, str], schema: type[BaseModel]) -> dict[str, str]:
    """
    Check query-string filters against a schema.

    Returns the raw values in query-string order; the SQL filter builder does
    its own coercion and relies on that order for placeholder numbering.

    Raises:
        BadRequestError: If a field is unknown or a value has the wrong type.
    """
    raw = dict(query_params)
    try:
        schema.model_validate(raw)
    except ValidationError as exc:
        raise BadRequestError(error_messages(exc.errors()))
    return raw
