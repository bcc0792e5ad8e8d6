from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _accept_both(name: str) -> AliasChoices:
    return AliasChoices(name, to_camel(name))


class ApiModel(BaseModel):
    """Base for every schema: reads snake_case or camelCase, writes camelCase.

    Also validates from ORM rows (``from_attributes``) so the SQL backend can
    snapshot rows directly.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=_accept_both, serialization_alias=to_camel),
        from_attributes=True,
    )


class Entity(ApiModel):
    """Stored entity snapshot. Assignments are validated so lifecycle code can set plain values."""

    model_config = ConfigDict(validate_assignment=True)


class Message(ApiModel):
    message: str
