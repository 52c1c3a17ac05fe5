"""Schema Base Classes — camelCase wire format over snake_case Python fields.

Invariants:
    - Inputs accept camelCase (wire) or snake_case (field name)
    - Outputs serialize camelCase when dumped by alias (FastAPI does by default)
    - UrlStr keeps the caller's original string; only validity is checked
"""

from typing import Annotated

from pydantic import (
    AfterValidator, AliasGenerator, BaseModel, ConfigDict, HttpUrl, TypeAdapter,
    ValidationError,
)
from pydantic.alias_generators import to_camel

_HTTP_URL = TypeAdapter(HttpUrl)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _check_url(value: str) -> str:
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        raise ValueError("Please enter a valid URL")
    return value


UrlStr = Annotated[str, AfterValidator(_check_url)]


class ApiInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiOutput(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )


class Pagination(ApiOutput):
    total: int
    pages: int
    page: int
    limit: int


def page_count(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0
