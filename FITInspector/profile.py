# Copyright 2019 Joan Puig
# See LICENSE for details


import warnings

from dataclasses import dataclass, field as dataclass_field
from typing import Dict, List, Optional, Tuple, Union

from FITInspector import duplicates
from FITInspector.base_types import BASE_TYPE_NAME_TO_METADATA


"""
This file provides the read-only lookup table that gives names, scales, offsets and units to the global message numbers
and field definition numbers found in FIT files. The decoder never consults it: it is only used to present decoded data.

The table below is a subset of the Profile.xlsx distributed with the FIT SDK: https://www.thisisant.com/resources/fit/
"""


class ProfileContentError(Exception):
    """
    This class represents an error due to content in the profile table that does not follow the expected format
    """
    pass


class ProfileContentWarning(Warning):
    """
    This class represents a warning due to content in the profile table that does not follow the expected format
    """
    pass


# Type alias for the rows of the profile table
DataRow = List[Union[None, int, float, str]]
DataTable = List[DataRow]


@dataclass(frozen=True)
class FieldProfile:
    """
    Holds the information for a field contained within a message in the profile
    """
    number: int
    name: str
    type: str
    scale: Optional[float]
    offset: Optional[float]
    units: Optional[str]


@dataclass(frozen=True)
class MessageProfile:
    """
    Holds the information for a message in the profile
    """
    number: int
    name: str
    fields: Tuple[FieldProfile, ...]
    fields_by_number: Dict[int, FieldProfile] = dataclass_field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'fields_by_number', {field.number: field for field in self.fields})

    def field(self, number: int) -> Optional[FieldProfile]:
        return self.fields_by_number.get(number)


@dataclass(frozen=True)
class Profile:
    """
    Holds every known message, keyed by global message number
    """
    messages: Tuple[MessageProfile, ...]
    messages_by_number: Dict[int, MessageProfile] = dataclass_field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'messages_by_number', {message.number: message for message in self.messages})

    def message(self, global_message_number: int) -> Optional[MessageProfile]:
        return self.messages_by_number.get(global_message_number)

    def message_name(self, global_message_number: int) -> str:
        """
        Returns the profile name of the message, or unknown_<number> for messages missing from the profile
        """
        message = self.message(global_message_number)
        return message.name if message else f'unknown_{global_message_number}'

    def message_number(self, name: str) -> Optional[int]:
        for message in self.messages:
            if message.name == name:
                return message.number
        return None

    def field(self, global_message_number: int, field_number: int) -> Optional[FieldProfile]:
        message = self.message(global_message_number)
        return message.field(field_number) if message else None

    @staticmethod
    def _non_fatal_error(message: str, strict: bool):
        """
        Issues a error or warning given a non fatal error message depending on the strict input
        """
        if strict:
            raise ProfileContentError(message)
        else:
            warnings.warn(message, ProfileContentWarning)

    @staticmethod
    def _if_empty(val, replacement):
        """
        Helper function that returns a replacement value if the value is an empty string or None
        """
        if val is None or val == '':
            return replacement
        else:
            return val

    @staticmethod
    def _split(table: DataTable) -> List[DataTable]:
        """
        Helper function that splits the table into one block per message. Every time the first column is not empty a new
        message starts
        """
        split_content = []
        for row in table:
            if all(cell is None or cell == '' for cell in row):
                continue
            if row[0] != '':
                split_content.append([])
            elif not split_content:
                raise ProfileContentError(f'Profile table has a field row before any message row: {row}')
            split_content[-1].append(row)

        return split_content

    @staticmethod
    def _parse_field(row: DataRow, message_name: str) -> FieldProfile:
        """
        Parses a field row: ['', '', number, name, type, scale, offset, units]
        """
        if len(row) != 8:
            raise ProfileContentError(f'Profile message "{message_name}" expecting field row length of 8, got {len(row)}')

        number, name, field_type = row[2], row[3], row[4]

        if not isinstance(number, int):
            raise ProfileContentError(f'Profile message "{message_name}" has a field with invalid number "{number}"')

        if not name:
            raise ProfileContentError(f'Profile message "{message_name}" field {number} has empty name')

        if not field_type:
            raise ProfileContentError(f'Profile message "{message_name}" field "{name}" has empty type')

        scale = Profile._if_empty(row[5], None)
        offset = Profile._if_empty(row[6], None)
        units = Profile._if_empty(row[7], None)

        return FieldProfile(number, name, field_type, scale, offset, units)

    @staticmethod
    def _parse_message(message_data: DataTable, strict: bool) -> MessageProfile:
        """
        Parses one message block. The first row holds the message name and number, the following rows its fields
        """
        message_name, message_number = message_data[0][0], message_data[0][1]

        if not isinstance(message_name, str) or message_name == '':
            raise ProfileContentError('Profile has empty message name')

        if not isinstance(message_number, int):
            raise ProfileContentError(f'Profile message "{message_name}" has invalid number "{message_number}"')

        fields = tuple([Profile._parse_field(row, message_name) for row in message_data[1:]])

        duplicate_numbers = duplicates([field.number for field in fields])
        if duplicate_numbers:
            Profile._non_fatal_error(f'Profile message "{message_name}" has duplicate field numbers: {duplicate_numbers}', strict)

        duplicate_names = duplicates([field.name for field in fields])
        if duplicate_names:
            Profile._non_fatal_error(f'Profile message "{message_name}" has duplicate field names: {duplicate_names}', strict)

        for field in fields:
            if field.type not in BASE_TYPE_NAME_TO_METADATA and field.type not in NAMED_TYPES:
                Profile._non_fatal_error(f'Profile message "{message_name}" field "{field.name}" has unknown type "{field.type}"', strict)

        return MessageProfile(message_number, message_name, fields)

    @staticmethod
    def from_table(table: DataTable, strict: bool = True) -> "Profile":
        """
        Builds a profile from plain rows. Message rows are [name, number, '', '', '', '', '', ''], each followed by its
        field rows ['', '', number, name, type, scale, offset, units]
        Use strict=True/False to turn non fatal inconsistencies in the table into errors/warnings
        """
        messages = tuple([Profile._parse_message(message_data, strict) for message_data in Profile._split(table)])

        duplicate_numbers = duplicates([message.number for message in messages])
        if duplicate_numbers:
            raise ProfileContentError(f'Profile has duplicate message numbers: {duplicate_numbers}')

        duplicate_names = duplicates([message.name for message in messages])
        if duplicate_names:
            raise ProfileContentError(f'Profile has duplicate message names: {duplicate_names}')

        return Profile(messages)


# Profile types that are not base types, they all map to one of the base types on the wire
NAMED_TYPES = (
    'bool',
    'date_time',
    'local_date_time',
    'file',
    'manufacturer',
    'event',
    'event_type',
    'activity',
    'sport',
    'sub_sport',
    'battery_status',
    'device_index',
    'message_index',
    'fit_base_type',
    'mesg_num',
)


PROFILE_TABLE: DataTable = [
    ['file_id', 0, '', '', '', '', '', ''],
    ['', '', 0, 'type', 'file', '', '', ''],
    ['', '', 1, 'manufacturer', 'manufacturer', '', '', ''],
    ['', '', 2, 'product', 'uint16', '', '', ''],
    ['', '', 3, 'serial_number', 'uint32z', '', '', ''],
    ['', '', 4, 'time_created', 'date_time', '', '', ''],
    ['', '', 5, 'number', 'uint16', '', '', ''],
    ['', '', 8, 'product_name', 'string', '', '', ''],

    ['sport', 12, '', '', '', '', '', ''],
    ['', '', 0, 'sport', 'sport', '', '', ''],
    ['', '', 1, 'sub_sport', 'sub_sport', '', '', ''],
    ['', '', 3, 'name', 'string', '', '', ''],

    ['session', 18, '', '', '', '', '', ''],
    ['', '', 254, 'message_index', 'message_index', '', '', ''],
    ['', '', 253, 'timestamp', 'date_time', '', '', 's'],
    ['', '', 0, 'event', 'event', '', '', ''],
    ['', '', 1, 'event_type', 'event_type', '', '', ''],
    ['', '', 2, 'start_time', 'date_time', '', '', ''],
    ['', '', 3, 'start_position_lat', 'sint32', '', '', 'semicircles'],
    ['', '', 4, 'start_position_long', 'sint32', '', '', 'semicircles'],
    ['', '', 5, 'sport', 'sport', '', '', ''],
    ['', '', 6, 'sub_sport', 'sub_sport', '', '', ''],
    ['', '', 7, 'total_elapsed_time', 'uint32', 1000, '', 's'],
    ['', '', 8, 'total_timer_time', 'uint32', 1000, '', 's'],
    ['', '', 9, 'total_distance', 'uint32', 100, '', 'm'],
    ['', '', 11, 'total_calories', 'uint16', '', '', 'kcal'],
    ['', '', 14, 'avg_speed', 'uint16', 1000, '', 'm/s'],
    ['', '', 15, 'max_speed', 'uint16', 1000, '', 'm/s'],
    ['', '', 16, 'avg_heart_rate', 'uint8', '', '', 'bpm'],
    ['', '', 17, 'max_heart_rate', 'uint8', '', '', 'bpm'],
    ['', '', 18, 'avg_cadence', 'uint8', '', '', 'rpm'],
    ['', '', 19, 'max_cadence', 'uint8', '', '', 'rpm'],
    ['', '', 20, 'avg_power', 'uint16', '', '', 'watts'],
    ['', '', 21, 'max_power', 'uint16', '', '', 'watts'],
    ['', '', 22, 'total_ascent', 'uint16', '', '', 'm'],
    ['', '', 23, 'total_descent', 'uint16', '', '', 'm'],
    ['', '', 25, 'first_lap_index', 'uint16', '', '', ''],
    ['', '', 26, 'num_laps', 'uint16', '', '', ''],

    ['lap', 19, '', '', '', '', '', ''],
    ['', '', 254, 'message_index', 'message_index', '', '', ''],
    ['', '', 253, 'timestamp', 'date_time', '', '', 's'],
    ['', '', 0, 'event', 'event', '', '', ''],
    ['', '', 1, 'event_type', 'event_type', '', '', ''],
    ['', '', 2, 'start_time', 'date_time', '', '', ''],
    ['', '', 3, 'start_position_lat', 'sint32', '', '', 'semicircles'],
    ['', '', 4, 'start_position_long', 'sint32', '', '', 'semicircles'],
    ['', '', 5, 'end_position_lat', 'sint32', '', '', 'semicircles'],
    ['', '', 6, 'end_position_long', 'sint32', '', '', 'semicircles'],
    ['', '', 7, 'total_elapsed_time', 'uint32', 1000, '', 's'],
    ['', '', 8, 'total_timer_time', 'uint32', 1000, '', 's'],
    ['', '', 9, 'total_distance', 'uint32', 100, '', 'm'],
    ['', '', 11, 'total_calories', 'uint16', '', '', 'kcal'],
    ['', '', 13, 'avg_speed', 'uint16', 1000, '', 'm/s'],
    ['', '', 14, 'max_speed', 'uint16', 1000, '', 'm/s'],
    ['', '', 15, 'avg_heart_rate', 'uint8', '', '', 'bpm'],
    ['', '', 16, 'max_heart_rate', 'uint8', '', '', 'bpm'],

    ['record', 20, '', '', '', '', '', ''],
    ['', '', 253, 'timestamp', 'date_time', '', '', 's'],
    ['', '', 0, 'position_lat', 'sint32', '', '', 'semicircles'],
    ['', '', 1, 'position_long', 'sint32', '', '', 'semicircles'],
    ['', '', 2, 'altitude', 'uint16', 5, 500, 'm'],
    ['', '', 3, 'heart_rate', 'uint8', '', '', 'bpm'],
    ['', '', 4, 'cadence', 'uint8', '', '', 'rpm'],
    ['', '', 5, 'distance', 'uint32', 100, '', 'm'],
    ['', '', 6, 'speed', 'uint16', 1000, '', 'm/s'],
    ['', '', 7, 'power', 'uint16', '', '', 'watts'],
    ['', '', 13, 'temperature', 'sint8', '', '', 'C'],
    ['', '', 53, 'fractional_cadence', 'uint8', 128, '', 'rpm'],
    ['', '', 73, 'enhanced_speed', 'uint32', 1000, '', 'm/s'],
    ['', '', 78, 'enhanced_altitude', 'uint32', 5, 500, 'm'],

    ['event', 21, '', '', '', '', '', ''],
    ['', '', 253, 'timestamp', 'date_time', '', '', 's'],
    ['', '', 0, 'event', 'event', '', '', ''],
    ['', '', 1, 'event_type', 'event_type', '', '', ''],
    ['', '', 3, 'data', 'uint32', '', '', ''],
    ['', '', 4, 'event_group', 'uint8', '', '', ''],

    ['device_info', 23, '', '', '', '', '', ''],
    ['', '', 253, 'timestamp', 'date_time', '', '', 's'],
    ['', '', 0, 'device_index', 'device_index', '', '', ''],
    ['', '', 1, 'device_type', 'uint8', '', '', ''],
    ['', '', 2, 'manufacturer', 'manufacturer', '', '', ''],
    ['', '', 3, 'serial_number', 'uint32z', '', '', ''],
    ['', '', 4, 'product', 'uint16', '', '', ''],
    ['', '', 5, 'software_version', 'uint16', 100, '', ''],
    ['', '', 6, 'hardware_version', 'uint8', '', '', ''],
    ['', '', 10, 'battery_voltage', 'uint16', 256, '', 'V'],
    ['', '', 11, 'battery_status', 'battery_status', '', '', ''],
    ['', '', 27, 'product_name', 'string', '', '', ''],

    ['activity', 34, '', '', '', '', '', ''],
    ['', '', 253, 'timestamp', 'date_time', '', '', ''],
    ['', '', 0, 'total_timer_time', 'uint32', 1000, '', 's'],
    ['', '', 1, 'num_sessions', 'uint16', '', '', ''],
    ['', '', 2, 'type', 'activity', '', '', ''],
    ['', '', 3, 'event', 'event', '', '', ''],
    ['', '', 4, 'event_type', 'event_type', '', '', ''],
    ['', '', 5, 'local_timestamp', 'local_date_time', '', '', ''],
    ['', '', 6, 'event_group', 'uint8', '', '', ''],

    ['file_creator', 49, '', '', '', '', '', ''],
    ['', '', 0, 'software_version', 'uint16', '', '', ''],
    ['', '', 1, 'hardware_version', 'uint8', '', '', ''],

    ['hrv', 78, '', '', '', '', '', ''],
    ['', '', 0, 'time', 'uint16', 1000, '', 's'],

    ['field_description', 206, '', '', '', '', '', ''],
    ['', '', 0, 'developer_data_index', 'uint8', '', '', ''],
    ['', '', 1, 'field_definition_number', 'uint8', '', '', ''],
    ['', '', 2, 'fit_base_type_id', 'fit_base_type', '', '', ''],
    ['', '', 3, 'field_name', 'string', '', '', ''],
    ['', '', 4, 'array', 'uint8', '', '', ''],
    ['', '', 5, 'components', 'string', '', '', ''],
    ['', '', 6, 'scale', 'uint8', '', '', ''],
    ['', '', 7, 'offset', 'sint8', '', '', ''],
    ['', '', 8, 'units', 'string', '', '', ''],
    ['', '', 14, 'native_mesg_num', 'mesg_num', '', '', ''],
    ['', '', 15, 'native_field_num', 'uint8', '', '', ''],

    ['developer_data_id', 207, '', '', '', '', '', ''],
    ['', '', 0, 'developer_id', 'byte', '', '', ''],
    ['', '', 1, 'application_id', 'byte', '', '', ''],
    ['', '', 2, 'manufacturer_id', 'manufacturer', '', '', ''],
    ['', '', 3, 'developer_data_index', 'uint8', '', '', ''],
    ['', '', 4, 'application_version', 'uint32', '', '', ''],
]


DEFAULT_PROFILE = Profile.from_table(PROFILE_TABLE)
