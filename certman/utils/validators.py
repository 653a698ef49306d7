"""Input validation utilities."""

import re

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def validate_cert_name(name: str) -> str:
    """
    Validate a certificate name used as a file stem.

    The name ends up in ``<name>.pem``, ``<name>.key`` and the side files, so
    it may not contain path separators or start with a dot.

    Args:
        name: Certificate name

    Returns:
        The unchanged name

    Raises:
        ValueError: If the name is empty or unsafe as a file stem

    Example:
        >>> validate_cert_name("myhost")
        'myhost'
    """
    if not name or not name.strip():
        raise ValueError("Certificate name cannot be empty")

    if not _NAME_PATTERN.match(name):
        raise ValueError(
            f"Invalid certificate name: {name!r} "
            "(use letters, digits, '.', '_' or '-', starting with a letter or digit)"
        )

    return name


def split_comma_list(raw: str) -> list[str]:
    """
    Split a comma separated answer into trimmed, non-empty items.

    Example:
        >>> split_comma_list("a.example, b.example,,")
        ['a.example', 'b.example']
    """
    return [item.strip() for item in raw.split(",") if item.strip()]
