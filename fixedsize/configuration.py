import dataclasses
import types
from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_REPLACEMENT_TYPE = "FixedString"


@dataclass(frozen=True)
class Configuration:
    """
    Parsed argument list of the annotation.

    :param size_map: Maps a field name to the capacity of its fixed-size replacement. Stored as a read-only view of
        a private copy, so the configuration cannot change after construction.
    :param replacement_type: Name of the generic fixed-capacity string type to substitute.
    """

    size_map: Dict[str, int] = dataclasses.field(default_factory=dict)
    replacement_type: str = DEFAULT_REPLACEMENT_TYPE

    def __post_init__(self) -> None:
        object.__setattr__(self, "size_map", types.MappingProxyType(dict(self.size_map)))

    def __hash__(self) -> int:
        return hash((frozenset(self.size_map.items()), self.replacement_type))

    def is_empty(self) -> bool:
        "True if no field is selected for rewriting."

        return not self.size_map

    def get_size(self, field_name: str) -> Optional[int]:
        return self.size_map.get(field_name)
