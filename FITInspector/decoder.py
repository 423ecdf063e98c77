# Copyright 2019 Joan Puig
# See LICENSE for details


import logging
import warnings
from enum import Enum
from typing import Dict, Iterator, Optional, Union

from FITInspector.base_types import UNDECODED, TypeMetadata, metadata_for
from FITInspector.model import Architecture, DataMessage, DeveloperFieldDefinition, FieldDefinition, FieldValue, File, FileFooter, FileHeader, MessageDefinition, Record, RecordHeader, Section
from FITInspector.reader import BufferExhaustedError, ByteReader, DecodeErrorReason, FITFileContentError, FITFileContentWarning, crc16


logger = logging.getLogger(__name__)


class InvalidHeaderError(FITFileContentError):
    reason = DecodeErrorReason.InvalidHeader


class UnsupportedFITFeature(FITFileContentError):
    reason = DecodeErrorReason.UnsupportedFeature


class OrphanDataMessageError(FITFileContentError):
    reason = DecodeErrorReason.OrphanDataMessage

    def __init__(self, local_message_type: int):
        super().__init__('Data message references local message type {} which has not been previously defined'.format(local_message_type))
        self.local_message_type = local_message_type


class ProtocolViolationError(FITFileContentError):
    reason = DecodeErrorReason.ProtocolViolation


class UnknownBaseTypeError(FITFileContentError):
    reason = DecodeErrorReason.UnknownBaseType

    def __init__(self, base_type: int):
        super().__init__('Unknown field base type 0x{:02X}'.format(base_type))
        self.base_type = base_type


class MalformedTrailerError(FITFileContentError):
    reason = DecodeErrorReason.MalformedTrailer

    def __init__(self, bytes_left: int):
        super().__init__('Malformed FIT file: unexpected trailing data ({} unknown bytes)'.format(bytes_left))
        self.bytes_left = bytes_left


class CRCMismatchError(FITFileContentError):
    reason = DecodeErrorReason.CRCMismatch


class DecoderState(Enum):
    AwaitingHeader = 0
    AwaitingRecords = 1
    AwaitingFooter = 2
    Done = 3


class Decoder:
    FILE_HEADER_MAGIC = '.FIT'
    FILE_HEADER_SIZES = (12, 14)
    CRC_SIZE = 2

    RECORD_HEADER_BITS = (
        ('header_type', 1),
        ('message_type', 1),
        ('message_type_specific', 1),
        ('reserved', 1),
        ('local_message_type', 4),
    )

    reader: ByteReader
    state: DecoderState
    check_crc: bool
    decode_wide_integers: bool

    header: Optional[FileHeader]
    message_definitions: Dict[int, MessageDefinition]

    def __init__(self, reader: ByteReader, check_crc: bool = False, decode_wide_integers: bool = False):
        self.reader = reader
        self.check_crc = check_crc
        self.decode_wide_integers = decode_wide_integers
        self.state = DecoderState.AwaitingHeader
        self.header = None
        self.message_definitions = {}

    def decode_file(self) -> File:
        header = self.decode_file_header()

        sections = []
        definition = None
        data_messages = []
        for record in self.iter_records():
            if record.header.is_definition_message:
                if definition is not None:
                    sections.append(Section(definition, tuple(data_messages)))
                definition = record.content
                data_messages = []
            else:
                data_messages.append(record.content)

        if definition is not None:
            sections.append(Section(definition, tuple(data_messages)))

        footer = self.decode_file_footer()

        file = File(header, tuple(sections), footer)
        logger.info('Decoded FIT file: %d sections, %d data messages', len(file.sections), file.data_message_count())
        return file

    def decode_file_header(self) -> FileHeader:
        if self.state != DecoderState.AwaitingHeader:
            raise RuntimeError('Decoder instances can only decode a single file, current state is {}'.format(self.state.name))

        self.reader.set_endianness(Architecture.LittleEndian)

        header_size = self.reader.read_uint8()
        protocol_version = self.reader.read_uint8()
        profile_version = self.reader.read_uint16()
        data_size = self.reader.read_uint32()
        data_type = self.reader.read_string(4)

        if data_type != Decoder.FILE_HEADER_MAGIC:
            raise InvalidHeaderError('Invalid FIT file format (header signature was not found). Expected: "{}", read: "{}"'.format(Decoder.FILE_HEADER_MAGIC, data_type))

        if header_size not in Decoder.FILE_HEADER_SIZES:
            raise InvalidHeaderError('Invalid header size, Expected: 12 or 14, read: {}'.format(header_size))

        if header_size == 14:
            crc = self.reader.read_uint16()
            if self.check_crc and crc != 0:
                self._verify_crc('header', 0, 12, crc)
        else:
            crc = None

        self.header = FileHeader(header_size, protocol_version, profile_version, data_size, data_type, crc)
        self.state = DecoderState.AwaitingRecords
        return self.header

    def iter_records(self) -> Iterator[Record]:
        """
        Decodes the record stream one record at a time

        The file header must have been decoded first. Exactly header.data_size bytes are consumed; a record that would read
        past that boundary raises BufferExhaustedError. The caller may stop iterating between records to abandon the decode.
        """
        if self.state != DecoderState.AwaitingRecords:
            raise RuntimeError('Records can only be decoded right after the file header, current state is {}'.format(self.state.name))

        records_end = self.header.records_end
        self.reader.set_limit(records_end)
        try:
            while self.reader.position() < records_end:
                yield self.decode_record()
        finally:
            self.reader.set_limit(None)

        self.state = DecoderState.AwaitingFooter

    def decode_record(self) -> Record:
        header = self.decode_record_header()

        if not header.is_normal_header:
            raise UnsupportedFITFeature('Compressed timestamp record headers are not supported (local message type {})'.format(header.compressed_local_message_type))

        if header.is_definition_message:
            content = self.decode_message_definition(header)
        else:
            content = self.decode_message_content(header)

        return Record(header, content)

    def decode_record_header(self) -> RecordHeader:
        bits = self.reader.read_bit_fields(Decoder.RECORD_HEADER_BITS)
        header = RecordHeader(**bits)

        if header.is_normal_header and header.reserved:
            warnings.warn('Reserved bit on record header at offset {} is 1, expected 0'.format(self.reader.position() - 1), FITFileContentWarning)

        return header

    def decode_field_definition(self) -> FieldDefinition:
        number = self.reader.read_uint8()
        size = self.reader.read_uint8()
        base_type = self.reader.read_uint8()
        return FieldDefinition(number, size, base_type)

    def decode_developer_field_definition(self) -> DeveloperFieldDefinition:
        number = self.reader.read_uint8()
        size = self.reader.read_uint8()
        developer_data_index = self.reader.read_uint8()
        return DeveloperFieldDefinition(number, size, developer_data_index)

    def decode_message_definition(self, header: RecordHeader) -> MessageDefinition:
        reserved_byte = self.reader.read_uint8()
        if reserved_byte:
            warnings.warn('Reserved byte after record header is {}, expected 0'.format(reserved_byte), FITFileContentWarning)

        architecture_byte = self.reader.read_uint8()
        architecture = Architecture.BigEndian if architecture_byte == 1 else Architecture.LittleEndian
        if architecture_byte > 1:
            warnings.warn('Unknown architecture {}, assuming little endian'.format(architecture_byte), FITFileContentWarning)

        # The global message number is already in the byte order this definition declares
        self.reader.set_endianness(architecture)

        global_message_number = self.reader.read_uint16()
        number_of_fields = self.reader.read_uint8()
        field_definitions = tuple([self.decode_field_definition() for _ in range(0, number_of_fields)])

        number_of_developer_fields = self.reader.read_uint8() if header.has_developer_data else 0
        developer_field_definitions = tuple([self.decode_developer_field_definition() for _ in range(0, number_of_developer_fields)])

        definition = MessageDefinition(reserved_byte, architecture, global_message_number, field_definitions, developer_field_definitions)
        self.message_definitions[header.local_message_type] = definition

        logger.debug('Definition for local message type %d: global message %d, %d fields, %d developer fields, %s',
                     header.local_message_type, global_message_number, number_of_fields, number_of_developer_fields, architecture.name)

        return definition

    def decode_field(self, field_definition: FieldDefinition) -> FieldValue:
        metadata = metadata_for(field_definition.base_type)
        if metadata is None:
            raise UnknownBaseTypeError(field_definition.base_type)

        if metadata.is_string:
            return self.reader.read_string(field_definition.size)

        count, remainder = divmod(field_definition.size, metadata.underlying_bytes)

        if metadata.is_wide_integer and not self.decode_wide_integers:
            self.reader.skip(metadata.underlying_bytes * count)
            value = UNDECODED
        else:
            value = self.decode_series(metadata, count)

        if remainder:
            warnings.warn('Field {} declares {} bytes which is not a multiple of {} ({} bytes), skipping the {} extra bytes'.format(
                field_definition.number, field_definition.size, metadata.fit_name, metadata.underlying_bytes, remainder), FITFileContentWarning)
            self.reader.skip(remainder)

        return value

    def decode_series(self, metadata: TypeMetadata, count: int) -> Union[int, float, tuple]:
        values = self.reader.read_array(metadata.numpy_type, count)
        if count == 1:
            return values[0]
        return tuple(values)

    def decode_message_content(self, header: RecordHeader) -> DataMessage:
        message_definition = self.message_definitions.get(header.local_message_type)

        if message_definition is None:
            raise OrphanDataMessageError(header.local_message_type)

        if header.has_developer_data:
            raise ProtocolViolationError('Message type specific bit should not be 1 for data messages (local message type {})'.format(header.local_message_type))

        self.reader.set_endianness(message_definition.architecture)

        fields = tuple([self.decode_field(field_definition) for field_definition in message_definition.field_definitions])
        developer_fields = tuple([self.reader.read_bytes(field_definition.size) for field_definition in message_definition.developer_field_definitions])
        return DataMessage(fields, developer_fields)

    def decode_file_footer(self) -> FileFooter:
        if self.state != DecoderState.AwaitingFooter:
            raise RuntimeError('The file footer can only be decoded after all records, current state is {}'.format(self.state.name))

        bytes_left = self.reader.bytes_left()

        if bytes_left == Decoder.CRC_SIZE:
            self.reader.set_endianness(Architecture.LittleEndian)
            crc = self.reader.read_uint16()
            if self.check_crc:
                self._verify_crc('file', 0, self.header.records_end, crc)
        elif bytes_left == 0:
            crc = None
        else:
            raise MalformedTrailerError(bytes_left)

        logger.debug('File footer: %s', 'CRC 0x{:04X}'.format(crc) if crc is not None else 'no CRC')

        self.state = DecoderState.Done
        return FileFooter(crc)

    def _verify_crc(self, what: str, start: int, end: int, expected_crc: int) -> None:
        computed_crc = crc16(self.reader.raw_bytes[start:end])
        if computed_crc != expected_crc:
            raise CRCMismatchError('Invalid {} CRC. Expected: 0x{:04X}, computed: 0x{:04X}'.format(what, expected_crc, computed_crc))

    @staticmethod
    def decode_fit_file(file_name: str, check_crc: bool = False, decode_wide_integers: bool = False) -> File:
        # Reads the binary data of the .FIT file
        with open(file_name, 'rb') as file:
            file_bytes = file.read()

        return decode(file_bytes, check_crc=check_crc, decode_wide_integers=decode_wide_integers)


def decode(buffer: Union[bytes, bytearray, memoryview], *, check_crc: bool = False, decode_wide_integers: bool = False) -> File:
    """
    Decodes a complete in-memory FIT file

    Raises a FITFileContentError subclass, whose reason attribute tells the failures apart, if the buffer is not a valid
    FIT file. Nothing partial is returned on failure.
    """
    reader = ByteReader(buffer)
    decoder = Decoder(reader, check_crc=check_crc, decode_wide_integers=decode_wide_integers)
    return decoder.decode_file()


__all__ = [
    'BufferExhaustedError',
    'ByteReader',
    'CRCMismatchError',
    'DecodeErrorReason',
    'Decoder',
    'DecoderState',
    'FITFileContentError',
    'FITFileContentWarning',
    'InvalidHeaderError',
    'MalformedTrailerError',
    'OrphanDataMessageError',
    'ProtocolViolationError',
    'UnknownBaseTypeError',
    'UnsupportedFITFeature',
    'decode',
]
