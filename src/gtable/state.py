# -------------------------------------
# gtable shared state
# -------------------------------------
"""
Process-wide options for gtable:
- max_format_rows: largest table format_table/print_table will render
- float_format: format spec applied to floats when rendering
- check_dtypes: reject groups whose column element kinds differ
"""
from typing import Any

_DEFAULTS: dict[str, Any] = {
    "max_format_rows": 100_000,
    "float_format": ".3g",
    "check_dtypes": True,
}

OPTIONS: dict[str, Any] = dict(_DEFAULTS)


def set_option(name: str, value: Any) -> None:
    """Set an option in OPTIONS. Unknown names raise KeyError."""
    if name not in _DEFAULTS:
        raise KeyError(f"unknown option: {name!r}")
    OPTIONS[name] = value


def get_option(name: str) -> Any:
    """Get an option from OPTIONS."""
    if name not in _DEFAULTS:
        raise KeyError(f"unknown option: {name!r}")
    return OPTIONS[name]


def get_options() -> dict[str, Any]:
    """Return the current OPTIONS dict."""
    return OPTIONS


def reset_options() -> None:
    """Restore every option to its default."""
    OPTIONS.clear()
    OPTIONS.update(_DEFAULTS)
