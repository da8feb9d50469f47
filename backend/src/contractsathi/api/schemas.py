"""Shared API schemas and base models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIRequestModel(BaseModel):
    """Base model for request bodies.

    Fields are sent in camelCase. Unknown fields are rejected to avoid
    silently accepting typos or outdated clients.
    """

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class APIResponseModel(BaseModel):
    """Base model for response bodies, serialized in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
