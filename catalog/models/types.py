"""Column types shared by the catalog models."""
from sqlalchemy.types import Text, TypeDecorator


def encode_string_array(values):
    """Render a list of strings as a PostgreSQL text[] literal.

    ``None`` and ``[]`` both become ``{}``. Every element is double-quoted with
    ``\\`` and ``"`` backslash-escaped.
    """
    if not values:
        return "{}"
    parts = []
    for value in values:
        escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
        parts.append(f'"{escaped}"')
    return "{" + ",".join(parts) + "}"


def decode_string_array(literal):
    """Parse a text[] literal back into a list of strings.

    Commas inside double quotes do not split elements; surrounding quotes are
    stripped and backslash escapes are undone. Unquoted elements (as emitted
    by PostgreSQL for simple values) are taken verbatim.
    """
    if literal is None:
        return []
    if isinstance(literal, (list, tuple)):
        return list(literal)
    if isinstance(literal, bytes):
        literal = literal.decode("utf-8")

    literal = literal.strip()
    if literal.startswith("{") and literal.endswith("}"):
        literal = literal[1:-1]
    if not literal:
        return []

    items = []
    current = []
    in_quotes = False
    escaped = False
    for ch in literal:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            items.append("".join(current))
            current = []
        else:
            current.append(ch)
    items.append("".join(current))
    return items


class StringArray(TypeDecorator):
    """List of strings stored as a text[] literal."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return encode_string_array(value)

    def process_result_value(self, value, dialect):
        return decode_string_array(value)
