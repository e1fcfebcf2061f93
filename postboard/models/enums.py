import enum


class Visibility(enum.Enum):
    PUBLIC = "PUBLIC"
    FOLLOWERS = "FOLLOWERS"
    PRIVATE = "PRIVATE"


class Category(enum.Enum):
    ART = "ART"
    PHOTOGRAPHY = "PHOTOGRAPHY"
    DESIGN = "DESIGN"
    ILLUSTRATION = "ILLUSTRATION"
    ARCHITECTURE = "ARCHITECTURE"
    FASHION = "FASHION"
    FOOD = "FOOD"
    NATURE = "NATURE"
    TRAVEL = "TRAVEL"
    OTHER = "OTHER"


class Tag(enum.Enum):
    PORTRAIT = "PORTRAIT"
    LANDSCAPE = "LANDSCAPE"
    STREET = "STREET"
    ABSTRACT = "ABSTRACT"
    MINIMAL = "MINIMAL"
    VINTAGE = "VINTAGE"
    BLACK_AND_WHITE = "BLACK_AND_WHITE"
    DIGITAL = "DIGITAL"
    ANALOG = "ANALOG"
    MACRO = "MACRO"


def parse_enum(enum_cls, value):
    """Case-insensitive lookup by member name; raises ValueError on no match."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid {enum_cls.__name__.lower()}: {value!r}")

    try:
        return enum_cls[value.strip().upper()]
    except KeyError:
        raise ValueError(f"Invalid {enum_cls.__name__.lower()}: {value}") from None
