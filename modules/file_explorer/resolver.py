"""
Resolution of user-supplied names against the explorer cursor.
"""

SEPARATOR = "/"
ROOT = "/"
PARENT = ".."


def parent_of(cursor: str) -> str:
    """Trim ``cursor`` at its last separator; root when nothing is left."""
    pos = cursor.rfind(SEPARATOR)
    if pos <= 0:
        return ROOT
    return cursor[:pos]


def resolve(cursor: str, name: str) -> str:
    """
    Turn ``name`` into a concrete path relative to ``cursor``.

    ``..`` yields the parent, absolute names are returned unchanged and
    anything else is joined onto the cursor. Nothing here touches the
    filesystem; callers validate the result.

    Args:
        cursor: Current directory, an absolute path
        name: Name typed by the user

    Returns:
        The resolved path
    """
    if not name:
        return cursor
    if name == PARENT:
        return parent_of(cursor)
    if name.startswith(SEPARATOR):
        return name
    return cursor.rstrip(SEPARATOR) + SEPARATOR + name
