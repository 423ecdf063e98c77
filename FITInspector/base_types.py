# Copyright 2019 Joan Puig
# See LICENSE for details


from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import numpy as np


class Undecoded(Enum):
    """
    Placeholder emitted for field values that are present on the wire but intentionally not decoded
    """
    Value = 'undecoded'

    def __repr__(self):
        return 'UNDECODED'


UNDECODED = Undecoded.Value


@dataclass(frozen=True)
class TypeMetadata:
    base_type_field: int
    fit_name: str
    underlying_bytes: int
    invalid_value: int
    numpy_type: Optional[type]
    is_wide_integer: bool = False

    @property
    def is_string(self) -> bool:
        return self.numpy_type is None

    def is_invalid(self, value) -> bool:
        """
        True when a decoded scalar is the FIT marker for "no value" of this base type
        Floats are checked for NaN, since their invalid bit pattern decodes to NaN
        """
        if isinstance(value, float):
            return bool(np.isnan(value))
        return value == self.invalid_value


ENUM = TypeMetadata(0x00, 'enum', 1, 0xFF, np.uint8)
SINT8 = TypeMetadata(0x01, 'sint8', 1, 0x7F, np.int8)
UINT8 = TypeMetadata(0x02, 'uint8', 1, 0xFF, np.uint8)
SINT16 = TypeMetadata(0x83, 'sint16', 2, 0x7FFF, np.int16)
UINT16 = TypeMetadata(0x84, 'uint16', 2, 0xFFFF, np.uint16)
SINT32 = TypeMetadata(0x85, 'sint32', 4, 0x7FFFFFFF, np.int32)
UINT32 = TypeMetadata(0x86, 'uint32', 4, 0xFFFFFFFF, np.uint32)
STRING = TypeMetadata(0x07, 'string', 1, 0x00, None)
FLOAT32 = TypeMetadata(0x88, 'float32', 4, 0xFFFFFFFF, np.float32)
FLOAT64 = TypeMetadata(0x89, 'float64', 8, 0xFFFFFFFFFFFFFFFF, np.float64)
UINT8Z = TypeMetadata(0x0A, 'uint8z', 1, 0x00, np.uint8)
UINT16Z = TypeMetadata(0x8B, 'uint16z', 2, 0x0000, np.uint16)
UINT32Z = TypeMetadata(0x8C, 'uint32z', 4, 0x00000000, np.uint32)
BYTE = TypeMetadata(0x0D, 'byte', 1, 0xFF, np.uint8)
SINT64 = TypeMetadata(0x8E, 'sint64', 8, 0x7FFFFFFFFFFFFFFF, np.int64, True)
UINT64 = TypeMetadata(0x8F, 'uint64', 8, 0xFFFFFFFFFFFFFFFF, np.uint64, True)
UINT64Z = TypeMetadata(0x90, 'uint64z', 8, 0x0000000000000000, np.uint64, True)


# Keyed by the full base type byte as it appears in a field definition
BASE_TYPE_FIELD_TO_METADATA: Dict[int, TypeMetadata] = {
    metadata.base_type_field: metadata for metadata in (
        ENUM, SINT8, UINT8, SINT16, UINT16, SINT32, UINT32, STRING, FLOAT32,
        FLOAT64, UINT8Z, UINT16Z, UINT32Z, BYTE, SINT64, UINT64, UINT64Z,
    )
}

BASE_TYPE_NAME_TO_METADATA: Dict[str, TypeMetadata] = {
    metadata.fit_name: metadata for metadata in BASE_TYPE_FIELD_TO_METADATA.values()
}


def metadata_for(base_type_field: int) -> Optional[TypeMetadata]:
    return BASE_TYPE_FIELD_TO_METADATA.get(base_type_field)
