import dataclasses
import os


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclasses.dataclass(frozen=True)
class TransformOptions:
    "Encapsulates source transformation settings."

    # name of the class decorator that carries the field sizes
    annotation: str = dataclasses.field(
        default_factory=lambda: os.getenv("FIXEDSIZE_ANNOTATION", "fixed")
    )
    # whether a size given for a name that is not a string field is an error
    strict: bool = dataclasses.field(
        default_factory=lambda: _env_flag("FIXEDSIZE_STRICT")
    )
    # whether the annotation decorator is left in place after rewriting
    keep_annotation: bool = dataclasses.field(
        default_factory=lambda: _env_flag("FIXEDSIZE_KEEP_ANNOTATION")
    )

    def as_dict(self):
        return dataclasses.asdict(self)
