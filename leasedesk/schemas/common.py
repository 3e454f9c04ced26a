"""Shared schema base classes."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response/request model serialized with camelCase keys.

    Field names stay snake_case in Python; populate_by_name lets code build
    instances with either spelling.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
