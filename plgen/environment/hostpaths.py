"""Host-specific fixes applied to tool output and the glue template."""

from __future__ import annotations

import sys
from typing import Callable, Optional

from ..errors import TemplateMarkerError

_CFLAGS_DIRECTIVE = "#cgo CFLAGS:"


def is_windows(platform: str | None = None) -> bool:
    return (platform or sys.platform).startswith("win")


def _long_path_name(path: str) -> str:  # pragma: no cover - Windows only
    import ctypes

    buffer = ctypes.create_unicode_buffer(32768)
    length = ctypes.windll.kernel32.GetLongPathNameW(path, buffer, len(buffer))  # type: ignore[attr-defined]
    return buffer.value if 0 < length < len(buffer) else path


def normalize_tool_path(
    raw: str,
    platform: str | None = None,
    expand: Optional[Callable[[str], str]] = None,
) -> str:
    """Clean a path printed by an external tool.

    On Windows pg_config reports 8.3 short names (``C:/PROGRA~1/...``) which
    cgo cannot use; they are expanded to long names and backslashes become
    forward slashes. Elsewhere only surrounding whitespace is removed.
    """
    path = raw.strip()
    if not is_windows(platform):
        return path
    path = (expand or _long_path_name)(path)
    return path.replace("\\", "/")


def apply_host_flags(
    source: str,
    include_dir: str,
    library_dir: Callable[[], str],
    platform: str | None = None,
) -> str:
    """Add the MinGW include and link flags PostgreSQL needs on Windows.

    ``library_dir`` is only called on Windows.
    """
    if not is_windows(platform):
        return source
    lines = source.split("\n")
    for index, line in enumerate(lines):
        if line.lstrip().startswith(_CFLAGS_DIRECTIVE):
            extra = [
                f'#cgo CFLAGS: -I"{include_dir}/port/win32"',
                f'#cgo LDFLAGS: -L"{library_dir()}" -lpostgres',
            ]
            return "\n".join(lines[: index + 1] + extra + lines[index + 1 :])
    raise TemplateMarkerError(f"Glue template has no '{_CFLAGS_DIRECTIVE}' directive")


__all__ = ["apply_host_flags", "is_windows", "normalize_tool_path"]
