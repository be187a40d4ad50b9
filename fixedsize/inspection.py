import ast
import enum
from typing import List, Optional

# name of the variable-length string type (possibly qualified, e.g. builtins.str)
STRING_TYPE_NAME = "str"


@enum.unique
class TypeShape(enum.Enum):
    "Classification of a field type annotation by its syntactic shape."

    VARIABLE_STRING = "str"
    OTHER = "other"


def type_path(node: ast.expr) -> Optional[List[str]]:
    "Segments of a dotted name such as `builtins.str`, or None if the expression is not a plain path."

    segments = []
    while isinstance(node, ast.Attribute):
        segments.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None

    segments.append(node.id)
    segments.reverse()
    return segments


def classify_type(node: Optional[ast.expr]) -> TypeShape:
    "Classifies a type annotation, matching the string type on the final segment of its path."

    if node is None:
        return TypeShape.OTHER

    path = type_path(node)
    if path is None:
        return TypeShape.OTHER

    if path == [STRING_TYPE_NAME] or path[-1] == STRING_TYPE_NAME:
        return TypeShape.VARIABLE_STRING
    else:
        return TypeShape.OTHER


def is_variable_string(node: Optional[ast.expr]) -> bool:
    return classify_type(node) is TypeShape.VARIABLE_STRING


def field_name(stmt: ast.stmt) -> Optional[str]:
    "Name of the field declared by an annotated assignment `name: type`, or None for other statements."

    if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
        return stmt.target.id
    else:
        return None
