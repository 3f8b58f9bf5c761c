"""
MetadataRecord – a SortedRecord carrying a color tag and a free-form
key/value payload, e.g. the settings active from `start` onwards.
"""

from __future__ import annotations

import random
import re
from typing import Any, ClassVar, Dict, Mapping, Optional

from pydantic import JsonValue, TypeAdapter, ValidationError

from ..errors import SortedInputError
from .record import SortedRecord

HEX_COLOR = re.compile(r"#?[0-9a-fA-F]{6}")

_metadata_adapter = TypeAdapter(Dict[str, JsonValue])


class MetadataRecord(SortedRecord):
    RECORD_TYPE: ClassVar[str] = "metadata"
    PRIMARY_KEY: ClassVar[str] = "__METADATA"

    type: str = "metadata"
    color: str
    metadata: Dict[str, JsonValue]

    @classmethod
    def _normalize(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        data = super()._normalize(data)
        data["color"] = cls.validate_color(data.get("color"))
        data["metadata"] = cls.validate_metadata(data.get("metadata"))
        return data

    @classmethod
    def validate_color(cls, color: Optional[str]) -> str:
        """Normalize to ``#rrggbb``; no color picks a random one."""
        if color is None:
            # cosmetic tag, the module-level PRNG is enough
            return "#%06x" % random.randrange(0x1000000)
        if not isinstance(color, str) or not HEX_COLOR.fullmatch(color):
            raise SortedInputError(
                f"invalid color, must be in hex format, e.g. #FF0000: {color!r}"
            )
        return "#" + color.lstrip("#")

    @classmethod
    def validate_metadata(cls, metadata: Any) -> Dict[str, JsonValue]:
        """`metadata` must be a JSON object: string keys, JSON values."""
        if not isinstance(metadata, Mapping):
            raise SortedInputError(f"Metadata must be a hash/object: {metadata!r}")
        try:
            return _metadata_adapter.validate_python(dict(metadata))
        except ValidationError as error:
            raise SortedInputError(
                f"Metadata must be JSON representable: {metadata!r}: {error}"
            ) from error

    def update(
        self,
        *,
        start: int,
        color: Optional[str],
        metadata: Mapping[str, Any],
    ) -> None:
        """Replace start, color and metadata together; `color=None` picks a new one."""
        start = self.validate_start(start, update=True)
        color = self.validate_color(color)
        metadata = self.validate_metadata(metadata)
        self._replace(start=start, color=color, metadata=metadata)

    def as_json(self) -> Dict[str, Any]:
        return {
            **super().as_json(),
            "color": self.color,
            "metadata": self.metadata,
        }

    def __str__(self) -> str:
        return f"<MetadataRecord s: {self.start}, c: {self.color}, m: {self.metadata}>"
