"""
Entity Schema

A Schema maps field names to FieldDefinitions (a DynamoDB type tag plus a
required flag). It checks entities before they are written and works out
which attributes a partial update assigns and which it removes.

Checks are on the type tag only: no ranges, formats or patterns. Set and
list types accept any sequence without looking at the elements.

Example:
    schema = Schema({
        'name': {'type': 'string', 'required': True},
        'age': {'type': FieldType.NUMBER},
    })
    schema.validate({'name': 'Ann', 'age': 5})      # -> {'name': 'Ann', 'age': 5}
    schema.validate({'age': 5})                     # raises ValidationError
"""

import logging
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError, ValidationError
from .utils import CREATED_ON, UPDATED_ON, epoch_millis

logger = logging.getLogger(__name__)


class FieldType(str, Enum):
    """DynamoDB attribute type tags a field can be declared with."""
    STRING = "S"
    NUMBER = "N"
    BINARY = "B"
    STRING_SET = "SS"
    NUMBER_SET = "NS"
    BINARY_SET = "BS"
    MAP = "M"
    LIST = "L"
    BOOLEAN = "BOOL"
    NULL = "NULL"

    @classmethod
    def _missing_(cls, value):
        # Accept spelled-out names ('string', 'string-set', 'Number', ...)
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            if key in cls.__members__:
                return cls.__members__[key]
            for member in cls:
                if member.value == key:
                    return member
        return None


SET_TYPES = (FieldType.STRING_SET, FieldType.NUMBER_SET, FieldType.BINARY_SET)
_SEQUENCE_TYPES = (list, tuple, set, frozenset)

_TYPE_ERRORS = {
    FieldType.STRING: "should be a valid string",
    FieldType.NUMBER: "should be a valid number",
    FieldType.BINARY: "should be of binary type",
    FieldType.STRING_SET: "should be a valid string set",
    FieldType.NUMBER_SET: "should be a valid number set",
    FieldType.BINARY_SET: "should be a valid binary set",
    FieldType.MAP: "should be a valid object",
    FieldType.LIST: "should be a valid list",
    FieldType.BOOLEAN: "should be a valid boolean value",
    FieldType.NULL: "should be null",
}


def _matches(value: Any, field_type: FieldType) -> bool:
    if field_type is FieldType.STRING:
        return isinstance(value, str)
    if field_type is FieldType.NUMBER:
        return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)
    if field_type is FieldType.BINARY:
        return isinstance(value, (bytes, bytearray, memoryview, str))
    if field_type in SET_TYPES or field_type is FieldType.LIST:
        return isinstance(value, _SEQUENCE_TYPES)
    if field_type is FieldType.MAP:
        return isinstance(value, Mapping)
    if field_type is FieldType.BOOLEAN:
        return isinstance(value, bool)
    return value is None


class FieldDefinition(BaseModel):
    """Declared type and required flag of one entity attribute."""

    type: FieldType = Field(..., description="DynamoDB type tag of the attribute")
    required: bool = Field(False, description="Whether the attribute must be present and truthy")

    @field_validator('type', mode='before')
    @classmethod
    def validate_type(cls, v):
        """Resolve spelled-out type names to their tag."""
        if isinstance(v, str):
            return FieldType(v)
        return v

    model_config = ConfigDict(frozen=True)


class UpdateFields(NamedTuple):
    """Assignments and removals making up one partial update."""
    set_fields: List[Tuple[str, Any]]
    remove_fields: List[str]
    updated_on: int


class Schema:
    """Field definitions for the entities of one table.

    Args:
        definition: Mapping of field name to a FieldDefinition or a dict such
            as ``{'type': 'S', 'required': True}``

    Raises:
        ConfigurationError: Definition missing, or an entry is malformed or
            names an unknown type
    """

    SchemaTypes = FieldType

    def __init__(self, definition: Mapping):
        if not definition:
            raise ConfigurationError("Schema definition is required")

        fields = {}
        for name, details in definition.items():
            if isinstance(details, FieldDefinition):
                fields[name] = details
                continue
            try:
                fields[name] = FieldDefinition.model_validate(details)
            except PydanticValidationError as e:
                raise ConfigurationError(
                    f"Invalid definition for field '{name}': {details!r}",
                    original_error=e,
                    context={'field': name}
                ) from e
        self._fields = MappingProxyType(fields)

    @property
    def fields(self) -> Mapping:
        """Read-only mapping of field name to FieldDefinition."""
        return self._fields

    def __contains__(self, name: str) -> bool:
        return name in self._fields

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={d.type.value}{'!' if d.required else ''}" for name, d in self._fields.items())
        return f"Schema({fields})"

    def validate_field(self, name: str, value: Any, field_type: Union[FieldType, str]) -> Optional[ValidationError]:
        """Check that value carries the given type tag.

        Returns:
            ValidationError describing the mismatch, or None if the value fits
        """
        try:
            field_type = FieldType(field_type)
        except ValueError:
            return ValidationError(f"{field_type} is not a valid field type", {name: 'invalid type'})

        if _matches(value, field_type):
            return None
        message = f"{name} {_TYPE_ERRORS[field_type]}"
        return ValidationError(message, {name: _TYPE_ERRORS[field_type]})

    def validate(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        """Validate an entity against the declared fields.

        Only declared fields are looked at and copied to the result; anything
        else on the entity is dropped. The first failure is raised. Non-empty
        set-typed sequences are converted to ``set``; empty ones are kept as
        given.

        Args:
            entity: Entity to validate

        Returns:
            Validated entity containing the declared fields that were present

        Raises:
            ValidationError: Required field missing/falsy or type mismatch
        """
        validated = {}
        for name, details in self._fields.items():
            value = entity.get(name)
            if details.required and not value:
                raise ValidationError(f"{name} is required", {name: 'required'})
            if name not in entity:
                continue
            if value is not None:
                error = self.validate_field(name, value, details.type)
                if error is not None:
                    raise error
                if details.type in SET_TYPES and value and not isinstance(value, (set, frozenset)):
                    value = self._to_set(name, value, details.type)
            validated[name] = value
        return validated

    def _to_set(self, name: str, value: Any, field_type: FieldType) -> set:
        try:
            return set(value)
        except TypeError as e:
            # Unhashable elements can never form a DynamoDB set
            raise ValidationError(
                f"{name} {_TYPE_ERRORS[field_type]}",
                {name: _TYPE_ERRORS[field_type]},
                original_error=e
            ) from e

    def build_update_fields(self, entity: Dict[str, Any]) -> UpdateFields:
        """Split a partial entity into attributes to assign and to remove.

        Walks the keys present on the entity that the schema declares. Truthy
        values are assigned, falsy optional values are removed and a falsy
        required value fails the whole update.

        Raises:
            ValidationError: A required field is present with a falsy value
        """
        set_fields = []
        remove_fields = []
        for name, value in entity.items():
            details = self._fields.get(name)
            if details is None or name in (CREATED_ON, UPDATED_ON):
                continue
            if details.required and not value:
                raise ValidationError(f"{name} is required", {name: 'required'})
            if value:
                set_fields.append((name, value))
            else:
                remove_fields.append(name)

        logger.debug(f"Update fields: set={[name for name, _ in set_fields]} remove={remove_fields}")
        return UpdateFields(set_fields, remove_fields, epoch_millis())
