"""Typed values exchanged as method input and output arguments."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

from certmgmt_adapter.exceptions import VariantMismatchError
from certmgmt_adapter.protocol.node_id import NodeId


class DataType(IntEnum):
    """Built-in data types used by the ServerConfiguration methods."""

    NULL = 0
    BOOLEAN = 1
    STRING = 12
    BYTE_STRING = 15
    NODE_ID = 17


class VariantArrayType(str, Enum):
    """Whether a variant holds one value or a sequence of values."""

    SCALAR = "Scalar"
    ARRAY = "Array"


# Python content type accepted for each data type
_CONTENT_TYPES: dict[DataType, type] = {
    DataType.BOOLEAN: bool,
    DataType.STRING: str,
    DataType.BYTE_STRING: bytes,
    DataType.NODE_ID: NodeId,
}


@dataclass(frozen=True)
class Variant:
    """A value tagged with its data type.

    Construction fails with VariantMismatchError if the value does not agree
    with the declared data type and array type. Array content is stored as a
    tuple.
    """

    data_type: DataType
    value: Any = None
    array_type: VariantArrayType = VariantArrayType.SCALAR

    def __post_init__(self) -> None:
        if self.data_type == DataType.NULL:
            if self.value is not None or self.array_type != VariantArrayType.SCALAR:
                raise self._mismatch()
            return

        expected = _CONTENT_TYPES[self.data_type]
        if self.array_type == VariantArrayType.ARRAY:
            if not isinstance(self.value, (list, tuple)):
                raise self._mismatch()
            if not all(isinstance(item, expected) for item in self.value):
                raise self._mismatch()
            object.__setattr__(self, "value", tuple(self.value))
        elif not isinstance(self.value, expected):
            raise self._mismatch()

    @classmethod
    def null(cls) -> Variant:
        """Variant marking an absent optional argument."""
        return cls(DataType.NULL)

    @property
    def is_array(self) -> bool:
        return self.array_type == VariantArrayType.ARRAY

    def is_kind(self, data_type: DataType, array_type: VariantArrayType = VariantArrayType.SCALAR) -> bool:
        """Check both the data type and the array type."""
        return self.data_type == data_type and self.array_type == array_type

    def _mismatch(self) -> VariantMismatchError:
        return VariantMismatchError.content_mismatch(
            data_type=self.data_type.name,
            array_type=self.array_type.value,
            value_type=type(self.value).__name__,
        )

