import uuid
from typing import Annotated, Any, ClassVar, FrozenSet, Generic, Optional, TypeVar
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints, model_serializer, model_validator
from pydantic.alias_generators import to_camel, to_snake

T = TypeVar("T")

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
PositiveInt = Annotated[int, Field(strict=True, ge=1)]


def _fits_bcrypt(value: str) -> str:
    # bcrypt only looks at the first 72 bytes and newer releases refuse more
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes long")
    return value


Password = Annotated[str, Field(min_length=8), AfterValidator(_fits_bcrypt)]

# Query-string pagination bounds shared by every list endpoint
MAX_PAGE_SIZE = 100


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UpdateModel(CamelModel):
    """
    Base for partial updates.

    Unknown fields are rejected, and an explicit ``null`` is only accepted
    for the fields listed in ``nullable_fields``.
    """

    model_config = ConfigDict(extra="forbid")

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class MaskedUpdateModel(UpdateModel):
    """
    Partial update whose allowed fields depend on who is asking.

    Unknown keys are kept instead of rejected so that the field mask in
    ``core.policy`` can refuse them along with known fields the actor may not
    write. Pass ``requested_fields()`` to ``authorize``.
    """

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def _reject_nulls(self):
        for name in self.model_fields_set & set(type(self).model_fields):
            if getattr(self, name) is None and name not in self.nullable_fields:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self) -> dict:
        known = type(self).model_fields
        return {key: value for key, value in super().changes().items() if key in known}

    def requested_fields(self) -> FrozenSet[str]:
        """Every key the client sent, known or not, in snake_case."""
        extra = {to_snake(key) for key in (self.model_extra or {})}
        return frozenset(self.changes()) | extra


class UserSummary(CamelModel):
    id: uuid.UUID
    full_name: str


class AssigneeSummary(UserSummary):
    email: str


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope for every response body: ``{success, message?, data?}``.

    ``message`` and ``data`` are omitted when empty.
    """

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler):
        body = handler(self)
        return {key: value for key, value in body.items() if key == "success" or value is not None}


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    return {"success": True, "message": message, "data": data}
