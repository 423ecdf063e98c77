# Copyright 2019 Joan Puig
# See LICENSE for details


from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from FITInspector.model import Architecture


class DecodeErrorReason(Enum):
    InvalidHeader = 'invalid_header'
    UnsupportedFeature = 'unsupported_feature'
    OrphanDataMessage = 'orphan_data_message'
    ProtocolViolation = 'protocol_violation'
    UnknownBaseType = 'unknown_base_type'
    MalformedTrailer = 'malformed_trailer'
    BufferExhausted = 'buffer_exhausted'
    CRCMismatch = 'crc_mismatch'


class FITFileContentError(Exception):
    reason: DecodeErrorReason = None


class FITFileContentWarning(Warning):
    pass


class BufferExhaustedError(FITFileContentError):
    reason = DecodeErrorReason.BufferExhausted


class CRCCalculator:
    CRC_TABLE = (
        0x0000, 0xCC01, 0xD801, 0x1400, 0xF001, 0x3C00, 0x2800, 0xE401,
        0xA001, 0x6C00, 0x7800, 0xB401, 0x5000, 0x9C01, 0x8801, 0x4400,
    )

    def __init__(self):
        self.current = 0

    def reset(self) -> None:
        self.current = 0

    def new_byte(self, byte: int) -> None:
        crc = self.current

        tmp = CRCCalculator.CRC_TABLE[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ CRCCalculator.CRC_TABLE[byte & 0xF]

        tmp = CRCCalculator.CRC_TABLE[crc & 0xF]
        crc = (crc >> 4) & 0x0FFF
        crc = crc ^ tmp ^ CRCCalculator.CRC_TABLE[(byte >> 4) & 0xF]

        self.current = crc

    def new_bytes(self, data: bytes) -> None:
        for byte in data:
            self.new_byte(byte)


def crc16(data: bytes) -> int:
    calculator = CRCCalculator()
    calculator.new_bytes(data)
    return calculator.current


BitFieldSpec = Sequence[Tuple[str, int]]


class ByteReader:
    """
    Sequential cursor over an in-memory buffer

    Multi-byte values are read in the byte order last selected with set_endianness (little endian initially).
    Reads never go past `limit`, which defaults to the end of the buffer and can be lowered to fence a region.
    """
    bytes_read: int
    limit: int
    architecture: Architecture
    raw_bytes: Union[bytes, bytearray, memoryview]

    def __init__(self, raw_bytes: Union[bytes, bytearray, memoryview]):
        self.raw_bytes = raw_bytes
        self.bytes_read = 0
        self.limit = len(raw_bytes)
        self.architecture = Architecture.LittleEndian

    def position(self) -> int:
        return self.bytes_read

    def bytes_left(self) -> int:
        return len(self.raw_bytes) - self.bytes_read

    def set_limit(self, limit: Optional[int]) -> None:
        if limit is None or limit > len(self.raw_bytes):
            self.limit = len(self.raw_bytes)
        else:
            self.limit = limit

    def set_endianness(self, architecture: Architecture) -> None:
        self.architecture = architecture

    @property
    def byte_order(self) -> str:
        return '>' if self.architecture == Architecture.BigEndian else '<'

    def _reserve(self, count: int) -> int:
        start = self.bytes_read
        if count < 0:
            raise ValueError('Cannot read a negative number of bytes ({})'.format(count))

        if start + count > self.limit:
            if self.limit < len(self.raw_bytes):
                raise BufferExhaustedError('Malformed FIT file: record at offset {} extends past the declared data size ({} bytes requested, {} available)'.format(start, count, self.limit - start))
            raise BufferExhaustedError('Unexpected end of file encountered at offset {} ({} bytes requested, {} available)'.format(start, count, self.limit - start))

        self.bytes_read = start + count
        return start

    def skip(self, count: int) -> None:
        self._reserve(count)

    def read_bytes(self, count: int) -> bytes:
        start = self._reserve(count)
        return bytes(self.raw_bytes[start:start + count])

    def read_array(self, numpy_type: type, count: int) -> List:
        if count == 0:
            return []

        dtype = np.dtype(numpy_type).newbyteorder(self.byte_order)
        raw = self.read_bytes(dtype.itemsize * count)
        return np.frombuffer(raw, dtype=dtype, count=count).tolist()

    def _read_scalar(self, numpy_type: type):
        return self.read_array(numpy_type, 1)[0]

    def read_uint8(self) -> int:
        return self._read_scalar(np.uint8)

    def read_int8(self) -> int:
        return self._read_scalar(np.int8)

    def read_uint16(self) -> int:
        return self._read_scalar(np.uint16)

    def read_int16(self) -> int:
        return self._read_scalar(np.int16)

    def read_uint32(self) -> int:
        return self._read_scalar(np.uint32)

    def read_int32(self) -> int:
        return self._read_scalar(np.int32)

    def read_uint64(self) -> int:
        return self._read_scalar(np.uint64)

    def read_int64(self) -> int:
        return self._read_scalar(np.int64)

    def read_float32(self) -> float:
        return self._read_scalar(np.float32)

    def read_float64(self) -> float:
        return self._read_scalar(np.float64)

    def read_bit_fields(self, spec: BitFieldSpec) -> Dict[str, int]:
        """
        Reads one byte and splits it into named bit fields, most significant bit first

        For the byte 0b11111001 and spec (('foo', 2), ('bar', 3), ('fizz', 3)) the result is {'foo': 3, 'bar': 7, 'fizz': 1}
        """
        total_bits = sum(width for _, width in spec)
        if total_bits > 8:
            raise ValueError('Bit fields {} need {} bits, a byte only has 8'.format([name for name, _ in spec], total_bits))

        byte = self.read_uint8()

        fields = {}
        bit_position = 8
        for name, width in spec:
            bit_position = bit_position - width
            fields[name] = (byte >> bit_position) & ((1 << width) - 1)

        return fields

    def read_string(self, max_length: int) -> str:
        raw = self.read_bytes(max_length)
        end = raw.find(b'\x00')
        if end >= 0:
            raw = raw[:end]
        return raw.decode('utf-8', errors='replace')
