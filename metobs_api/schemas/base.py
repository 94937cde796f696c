"""
Base Pydantic schemas.

This module contains base schemas with common configuration
that other schemas can inherit from.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    All other schemas should inherit from this class.
    """

    model_config = ConfigDict(from_attributes=True)


class ValueSchema(BaseSchema):
    """
    Immutable schema serialized with camelCase field names.

    Instances can be built with either the Python field names or the aliases.
    """

    model_config = ConfigDict(
        from_attributes=True,
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
