# Qualified names of classes created inside a function carry this marker;
# such names cannot be re-imported outside the interpreter that created them.
ANONYMOUS_CLASS_MARKER = "<locals>"

SYNTHETIC_NAME_MARKERS = (ANONYMOUS_CLASS_MARKER, "<lambda>", "<genexpr>")

CONSTRUCTOR_NAME = "__init__"

__all__ = [
    "ANONYMOUS_CLASS_MARKER",
    "SYNTHETIC_NAME_MARKERS",
    "CONSTRUCTOR_NAME",
]
