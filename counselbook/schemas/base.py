# counselbook/schemas/base.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema for every payload crossing the API boundary.

    Attributes are snake_case in Python and camelCase on the wire; inbound
    payloads accept either spelling. ORM rows can be validated directly.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
