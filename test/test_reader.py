# Copyright 2019 Joan Puig
# See LICENSE for details


import struct

import numpy as np
import pytest

from FITInspector.model import Architecture
from FITInspector.reader import BufferExhaustedError, ByteReader, CRCCalculator, DecodeErrorReason, crc16


@pytest.mark.parametrize('method, fmt, value', [
    ('read_uint8', 'B', 200),
    ('read_int8', 'b', -100),
    ('read_uint16', 'H', 0xBEEF),
    ('read_int16', 'h', -12345),
    ('read_uint32', 'I', 0xDEADBEEF),
    ('read_int32', 'i', -123456789),
    ('read_uint64', 'Q', 0x0123456789ABCDEF),
    ('read_int64', 'q', -9876543210),
    ('read_float32', 'f', 1.5),
    ('read_float64', 'd', -2.25),
])
@pytest.mark.parametrize('architecture, endian', [
    (Architecture.LittleEndian, '<'),
    (Architecture.BigEndian, '>'),
])
def test_read_fixed_width(method, fmt, value, architecture, endian):
    raw = struct.pack(endian + fmt, value) + b'\xFF'
    reader = ByteReader(raw)
    reader.set_endianness(architecture)

    assert getattr(reader, method)() == value
    assert reader.position() == struct.calcsize(fmt)
    assert reader.bytes_left() == 1


def test_endianness_only_affects_later_reads():
    reader = ByteReader(b'\x01\x02\x01\x02')

    first = reader.read_uint16()
    reader.set_endianness(Architecture.BigEndian)
    second = reader.read_uint16()

    assert first == 0x0201
    assert second == 0x0102


def test_read_array():
    reader = ByteReader(struct.pack('>4H', 1, 2, 3, 4))
    reader.set_endianness(Architecture.BigEndian)

    assert reader.read_array(np.uint16, 4) == [1, 2, 3, 4]
    assert reader.read_array(np.uint16, 0) == []
    assert reader.position() == 8


def test_read_bit_fields():
    reader = ByteReader(bytes([0b11111001]))
    assert reader.read_bit_fields((('foo', 2), ('bar', 3), ('fizz', 3))) == {'foo': 3, 'bar': 7, 'fizz': 1}
    assert reader.position() == 1


def test_read_bit_fields_partial_byte():
    reader = ByteReader(bytes([0b10100000]))
    assert reader.read_bit_fields((('a', 1), ('b', 2))) == {'a': 1, 'b': 1}
    assert reader.position() == 1


def test_read_bit_fields_too_wide():
    reader = ByteReader(b'\x00')
    with pytest.raises(ValueError):
        reader.read_bit_fields((('a', 4), ('b', 5)))
    assert reader.position() == 0


@pytest.mark.parametrize('raw, max_length, expected', [
    (b'ab\x00cd', 5, 'ab'),
    (b'abcde', 5, 'abcde'),
    (b'\x00bcde', 5, ''),
    (b'caf\xc3\xa9\x00', 6, 'café'),
])
def test_read_string(raw, max_length, expected):
    reader = ByteReader(raw + b'\x01')
    assert reader.read_string(max_length) == expected
    assert reader.position() == max_length


def test_skip_and_read_bytes():
    reader = ByteReader(b'\x00\x01\x02\x03')
    reader.skip(1)
    assert reader.read_bytes(2) == b'\x01\x02'
    assert reader.position() == 3


def test_buffer_exhausted():
    reader = ByteReader(b'\x01')
    with pytest.raises(BufferExhaustedError) as error:
        reader.read_uint16()
    assert error.value.reason == DecodeErrorReason.BufferExhausted
    assert reader.position() == 0

    with pytest.raises(BufferExhaustedError):
        reader.skip(2)


def test_limit_fences_reads():
    reader = ByteReader(b'\x00\x01\x02\x03')
    reader.set_limit(2)
    reader.read_uint8()

    with pytest.raises(BufferExhaustedError, match='declared data size'):
        reader.read_uint16()

    reader.set_limit(None)
    assert reader.read_uint16() == 0x0201


def test_limit_never_exceeds_buffer():
    reader = ByteReader(b'\x00')
    reader.set_limit(10)
    assert reader.limit == 1


def test_accepts_bytearray_and_memoryview():
    assert ByteReader(bytearray(b'\x05')).read_uint8() == 5
    assert ByteReader(memoryview(b'\x00\x07')).read_uint16() == 0x0700


def test_crc16():
    assert crc16(b'') == 0
    assert crc16(b'123456789') == 0xBB3D

    calculator = CRCCalculator()
    calculator.new_bytes(b'1234')
    calculator.new_bytes(b'56789')
    assert calculator.current == 0xBB3D

    calculator.reset()
    assert calculator.current == 0
