"""Path parameter converters.

Built-in converters for route segments like ``{id:int}``. A converter
only decides which segments match; captured values stay strings.
"""

# Regex fragment each converter's segment must fully match
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "uuid": r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}",
    "path": r".+",
}

# Name under which a bare ``*`` catch-all is captured
WILDCARD = "*"
