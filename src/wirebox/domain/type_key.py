"""TypeKey normalization shared by every binding table."""

from typing import Any, Union

BUILTINS_PREFIX = "builtins."

TypeName = Union[str, type]


def qualified_name(cls: type) -> str:
    """Return the importable dotted name of a class.

    Builtins are reported without their module so ``object`` and
    ``"builtins.object"`` spell the same thing.
    """
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def clean_name(name: str) -> str:
    """Strip whitespace and leading separators, keeping the original case.

    Backslash separators are accepted and turned into dots.
    """
    cleaned = name.strip().replace("\\", ".").lstrip(".")
    if cleaned.lower().startswith(BUILTINS_PREFIX):
        cleaned = cleaned[len(BUILTINS_PREFIX) :]
    return cleaned


def normalize_type_key(name: TypeName) -> str:
    """Return the canonical, case-insensitive TypeKey for a type name or class.

    Args:
        name: A dotted type name or a class object.

    Returns:
        The lower-cased, separator-stripped key.

    Example:
        >>> normalize_type_key(".App.Services.Mailer") == normalize_type_key("app.services.mailer")
        True
    """
    if isinstance(name, type):
        return qualified_name(name).lower()
    return clean_name(name).lower()


def is_type_name(value: Any) -> bool:
    """Whether a value can be used as a type name (a class or a string)."""
    return isinstance(value, (str, type))
