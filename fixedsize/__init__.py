from .arguments import parse_arguments
from .configuration import DEFAULT_REPLACEMENT_TYPE, Configuration
from .core import (
    ArgumentError, DeclarationError, InvalidTypAssignment, MalformedArgument, TransformError, UnmatchedFieldError,
    fixed
)
from .options import TransformOptions
from .rewriter import rewrite_declaration
from .transform import (
    collect_configurations, read_source, transform_declaration, transform_file, transform_source
)
