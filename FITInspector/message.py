# Copyright 2019 Joan Puig
# See LICENSE for details


from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from FITInspector.base_types import TypeMetadata, Undecoded, metadata_for
from FITInspector.model import DataMessage, FieldDefinition, FieldValue, File, MessageDefinition
from FITInspector.profile import DEFAULT_PROFILE, FieldProfile, Profile


@dataclass(frozen=True)
class NamedField:
    number: int
    name: str
    value: Optional[FieldValue]
    units: Optional[str]


@dataclass(frozen=True)
class NamedMessage:
    global_message_number: int
    name: str
    fields: Tuple[NamedField, ...]
    developer_fields: Tuple[bytes, ...]

    def as_dict(self) -> dict:
        return {field.name: field.value for field in self.fields}

    def __getitem__(self, name: str) -> FieldValue:
        for field in self.fields:
            if field.name == name:
                return field.value
        raise KeyError(name)


def mark_invalid(value: FieldValue, metadata: Optional[TypeMetadata]) -> Optional[FieldValue]:
    """
    Replaces the invalid value of the base type by None, for scalars and for arrays made only of invalid elements
    """
    if metadata is None or metadata.is_string or isinstance(value, Undecoded):
        return value

    if isinstance(value, tuple):
        if value and all(metadata.is_invalid(v) for v in value):
            return None
        return value

    return None if metadata.is_invalid(value) else value


def scale_value(value: FieldValue, field_profile: Optional[FieldProfile]) -> FieldValue:
    """
    Applies the profile scale and offset, value / scale - offset, to numeric scalars and arrays
    Strings, undecoded and invalid values are returned untouched
    """
    if value is None or field_profile is None or (field_profile.scale is None and field_profile.offset is None):
        return value

    if isinstance(value, (str, Undecoded)):
        return value

    scale = field_profile.scale if field_profile.scale is not None else 1
    offset = field_profile.offset if field_profile.offset is not None else 0

    if isinstance(value, tuple):
        return tuple([v / scale - offset for v in value])

    return value / scale - offset


def name_field(global_message_number: int, field_definition: FieldDefinition, value: FieldValue, profile: Profile, apply_scale: bool) -> NamedField:
    value = mark_invalid(value, metadata_for(field_definition.base_type))
    field_profile = profile.field(global_message_number, field_definition.number)

    if field_profile is None:
        return NamedField(field_definition.number, f'field_{field_definition.number}', value, None)

    if apply_scale:
        value = scale_value(value, field_profile)

    return NamedField(field_definition.number, field_profile.name, value, field_profile.units)


def name_message(definition: MessageDefinition, data_message: DataMessage, profile: Profile = DEFAULT_PROFILE, apply_scale: bool = True) -> NamedMessage:
    number = definition.global_message_number
    fields = tuple([name_field(number, field_definition, value, profile, apply_scale)
                    for field_definition, value in zip(definition.field_definitions, data_message.fields)])

    return NamedMessage(number, profile.message_name(number), fields, data_message.developer_fields)


def named_messages(file: File, profile: Profile = DEFAULT_PROFILE, apply_scale: bool = True) -> Iterator[NamedMessage]:
    """
    Yields every data message of the file, in file order, with profile names attached
    """
    for section in file.sections:
        for data_message in section.data_messages:
            yield name_message(section.definition, data_message, profile, apply_scale)
