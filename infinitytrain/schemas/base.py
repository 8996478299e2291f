"""
infinitytrain/schemas/base.py
Shared Pydantic base - camelCase on the wire, snake_case in Python
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema for every request/response body.

    Responses are serialized with camelCase keys (isDeleted, resourceLinks,
    userId, ...). Requests accept either camelCase or snake_case keys.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
