import dataclasses
from typing import Any
from uuid import UUID
from enum import Enum

# Recursive JSON-safe serialiser ------------------------------------

class JSONable:
    def _to_jsonable(self, obj: Any) -> Any:  # noqa: ANN401 – generic helper
        """Return *obj* converted into JSON-serialisable structures.

        • dataclasses → dict (recursively processed)
        • set → list (sorted for determinism when items are plain types)
        • bytes → ``0x`` prefixed hex string
        • UUID / Enum → str / value
        • list / tuple / dict processed recursively
        • everything else returned unchanged.
        """

        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {
                f.name: self._to_jsonable(getattr(obj, f.name))
                for f in dataclasses.fields(obj)
            }

        if isinstance(obj, dict):
            return {k: self._to_jsonable(v) for k, v in obj.items()}

        if isinstance(obj, (list, tuple)):
            return [self._to_jsonable(v) for v in obj]

        if isinstance(obj, (set, frozenset)):
            # Owner addresses sort fine; anything else keeps iteration order
            try:
                return [self._to_jsonable(v) for v in sorted(obj)]
            except TypeError:
                return [self._to_jsonable(v) for v in obj]

        if isinstance(obj, (bytes, bytearray)):
            return "0x" + bytes(obj).hex()

        if isinstance(obj, UUID):
            return str(obj)

        if isinstance(obj, Enum):
            return obj.value

        return obj
