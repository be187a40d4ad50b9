"""
Mark a record class for fixed-size string rewriting.

The marker is recognized syntactically by the source transformer; at run time it leaves the class untouched.
"""

from typing import Iterable, Optional, Tuple

ERRMSG = "Must specify an Ident=Int or typ=Identifier"


def fixed(*args, **sizes):
    "Replace the listed variable-length string fields with a fixed-capacity string type (e.g. fixed(code=4))."

    if len(args) == 1 and not sizes and isinstance(args[0], type):
        # used as a bare decorator without parentheses
        return args[0]

    def decorator(cls):
        return cls

    return decorator


class ArgumentError(ValueError):
    "Raised when the argument list of the annotation cannot be parsed."

    message: str
    start: Optional[int]
    end: Optional[int]

    def __init__(self, message: str, start: int = None, end: int = None):
        super().__init__(message)
        self.message = message
        self.start = start
        self.end = end

    def __str__(self) -> str:
        if self.start is not None:
            return f"{self.message} (at offset {self.start})"
        else:
            return self.message


class MalformedArgument(ArgumentError):
    "An argument is neither of the form `Ident=Int` nor `typ=Identifier`."

    def __init__(self, start: int = None, end: int = None, message: str = ERRMSG):
        super().__init__(message, start, end)


class InvalidTypAssignment(MalformedArgument):
    "An identifier value is assigned to a name other than `typ`."

    name: str

    def __init__(self, name: str, start: int = None, end: int = None):
        super().__init__(start, end, f"{ERRMSG}, not {name}=Identifier")
        self.name = name


class UnmatchedFieldError(ValueError):
    "Raised in strict mode when a size is given for a name that is not a string field of the class."

    class_name: str
    missing: Tuple[str, ...]
    mismatched: Tuple[str, ...]

    def __init__(
        self, class_name: str, missing: Iterable[str], mismatched: Iterable[str]
    ):
        self.class_name = class_name
        self.missing = tuple(missing)
        self.mismatched = tuple(mismatched)

        reasons = []
        if self.missing:
            names = ", ".join(self.missing)
            reasons.append(f"no such field: {names}")
        if self.mismatched:
            names = ", ".join(self.mismatched)
            reasons.append(f"field is not of type str: {names}")
        super().__init__(f"class {class_name}: " + "; ".join(reasons))


class DeclarationError(ValueError):
    "Raised when the declaration text is not a single class definition."


class TransformError(RuntimeError):
    "Raised when an annotated class in a source file cannot be transformed."

    filename: str
    line: int
    column: int

    def __init__(self, message: str, filename: str, line: int, column: int):
        super().__init__(
            f'error in annotation in file "{filename}", line {line}, column {column}: {message}'
        )
        self.filename = filename
        self.line = line
        self.column = column
