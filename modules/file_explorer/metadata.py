"""
Pure formatting helpers for filesystem metadata.
"""

import grp
import pwd
import stat
from datetime import datetime

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
LISTING_TIME_FORMAT = "%Y-%m-%d %H:%M"
INFO_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_PERMISSION_BITS = (
    (stat.S_IRUSR, "r"), (stat.S_IWUSR, "w"), (stat.S_IXUSR, "x"),
    (stat.S_IRGRP, "r"), (stat.S_IWGRP, "w"), (stat.S_IXGRP, "x"),
    (stat.S_IROTH, "r"), (stat.S_IWOTH, "w"), (stat.S_IXOTH, "x"),
)


def format_permissions(mode: int) -> str:
    """
    Render a mode as a ten character ``ls``-style string.

    The first character is ``d`` for directories and ``-`` for everything
    else, followed by the rwx triplets for user, group and other.
    """
    chars = ["d" if stat.S_ISDIR(mode) else "-"]
    for bit, char in _PERMISSION_BITS:
        chars.append(char if mode & bit else "-")
    return "".join(chars)


def octal_mode(mode: int) -> str:
    """Permission bits as three octal digits, e.g. ``755``."""
    return format(mode & 0o777, "03o")


def format_size(size: int) -> str:
    """
    Human readable size with two decimals.

    Divides by 1024 until the value drops below 1024 or the largest unit
    (TB) is reached.
    """
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.2f} {SIZE_UNITS[unit]}"


def format_timestamp(timestamp: float, with_seconds: bool = False) -> str:
    fmt = INFO_TIME_FORMAT if with_seconds else LISTING_TIME_FORMAT
    return datetime.fromtimestamp(timestamp).strftime(fmt)


def lookup_owner(uid: int) -> str:
    """User name for ``uid``, or the numeric id when it has no entry."""
    try:
        return pwd.getpwuid(uid).pw_name
    except (KeyError, OverflowError):
        return str(uid)


def lookup_group(gid: int) -> str:
    """Group name for ``gid``, or the numeric id when it has no entry."""
    try:
        return grp.getgrgid(gid).gr_name
    except (KeyError, OverflowError):
        return str(gid)
