"""Field definitions for dynamic forms.

A form's fields are stored as a JSON list on the form row. Each entry is
one member of the ``FieldSpec`` union, discriminated by ``type``, so the
accepted value shape (single string or set of strings) is fixed by the
field's class rather than inspected at runtime.
"""

import re
from typing import Annotated, ClassVar, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class FieldValidation(BaseModel):
    """Optional constraints checked after the required-field test"""

    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None

    @field_validator("pattern")
    @classmethod
    def pattern_must_compile(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid regular expression: {e}")
        return value


class BaseField(BaseModel):
    model_config = ConfigDict(extra="ignore")

    multi_value: ClassVar[bool] = False

    id: str = Field(..., min_length=1)
    label: str = ""
    placeholder: Optional[str] = None
    required: bool = False
    validation: Optional[FieldValidation] = None


class TextField(BaseField):
    type: Literal["text"] = "text"


class EmailField(BaseField):
    type: Literal["email"] = "email"


class TextAreaField(BaseField):
    type: Literal["textarea"] = "textarea"


class NumberField(BaseField):
    type: Literal["number"] = "number"


class DateField(BaseField):
    type: Literal["date"] = "date"


class ChoiceField(BaseField):
    options: List[str] = Field(..., min_length=1)


class SelectField(ChoiceField):
    type: Literal["select"] = "select"


class RadioField(ChoiceField):
    type: Literal["radio"] = "radio"


class CheckboxField(ChoiceField):
    multi_value: ClassVar[bool] = True

    type: Literal["checkbox"] = "checkbox"


FieldSpec = Annotated[
    Union[
        TextField,
        EmailField,
        TextAreaField,
        NumberField,
        DateField,
        SelectField,
        RadioField,
        CheckboxField,
    ],
    Field(discriminator="type"),
]

field_list_adapter = TypeAdapter(List[FieldSpec])


def parse_fields(raw_fields: list) -> List[BaseField]:
    """Rebuild typed field specs from their stored JSON form"""
    return field_list_adapter.validate_python(raw_fields or [])


def dump_fields(fields: List[BaseField]) -> list:
    """Serialize field specs for the JSON column"""
    return [field.model_dump(mode="json", exclude_none=True) for field in fields]


def duplicate_field_ids(fields: List[BaseField]) -> List[str]:
    """Return field ids that appear more than once, in first-seen order"""
    seen = set()
    duplicates = []
    for field in fields:
        if field.id in seen and field.id not in duplicates:
            duplicates.append(field.id)
        seen.add(field.id)
    return duplicates
