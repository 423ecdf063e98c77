# Copyright 2019 Joan Puig
# See LICENSE for details


from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from FITInspector.base_types import Undecoded


class Architecture(Enum):
    LittleEndian = 0
    BigEndian = 1


# A decoded field: a scalar, a tuple of scalars for array fields, a string, or the UNDECODED sentinel
FieldValue = Union[int, float, str, Tuple[Union[int, float], ...], Undecoded]


@dataclass(frozen=True)
class FileHeader:
    header_size: int
    protocol_version: int
    profile_version: int
    data_size: int
    data_type: str
    crc: Optional[int]

    @property
    def records_end(self) -> int:
        return self.header_size + self.data_size

    @property
    def protocol_version_str(self) -> str:
        return '{}.{}'.format(self.protocol_version >> 4, self.protocol_version & 0x0F)

    @property
    def profile_version_str(self) -> str:
        return '{}.{:02d}'.format(self.profile_version // 100, self.profile_version % 100)


@dataclass(frozen=True)
class RecordHeader:
    header_type: int
    message_type: int
    message_type_specific: int
    reserved: int
    local_message_type: int

    @property
    def is_normal_header(self) -> bool:
        return self.header_type == 0

    @property
    def is_definition_message(self) -> bool:
        return self.message_type == 1

    @property
    def has_developer_data(self) -> bool:
        return self.message_type_specific == 1

    @property
    def compressed_local_message_type(self) -> int:
        """
        Local message type of a compressed timestamp header, held in bits 5-6 of the header byte
        """
        return (self.message_type << 1) | self.message_type_specific



@dataclass(frozen=True)
class RecordContent:
    pass


@dataclass(frozen=True)
class FieldDefinition:
    number: int
    size: int
    base_type: int


@dataclass(frozen=True)
class DeveloperFieldDefinition:
    number: int
    size: int
    developer_data_index: int


@dataclass(frozen=True)
class MessageDefinition(RecordContent):
    reserved_byte: int
    architecture: Architecture
    global_message_number: int
    field_definitions: Tuple[FieldDefinition, ...]
    developer_field_definitions: Tuple[DeveloperFieldDefinition, ...]

    @property
    def payload_byte_size(self) -> int:
        return sum(field.size for field in self.field_definitions) + sum(field.size for field in self.developer_field_definitions)


@dataclass(frozen=True)
class DataMessage(RecordContent):
    fields: Tuple[FieldValue, ...]
    developer_fields: Tuple[bytes, ...] = ()


@dataclass(frozen=True)
class Record:
    header: RecordHeader
    content: RecordContent


@dataclass(frozen=True)
class Section:
    definition: MessageDefinition
    data_messages: Tuple[DataMessage, ...]


@dataclass(frozen=True)
class FileFooter:
    crc: Optional[int]


@dataclass(frozen=True)
class File:
    header: FileHeader
    sections: Tuple[Section, ...]
    footer: FileFooter

    def data_message_count(self) -> int:
        return sum(len(section.data_messages) for section in self.sections)

    def definitions(self) -> Tuple[MessageDefinition, ...]:
        return tuple(section.definition for section in self.sections)
