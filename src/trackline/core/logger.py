"""Console and web logging for Trackline.

Every entry goes to the web log buffer while the server runs (web mode).
On the console, calls, results and info messages are printed in verbose mode
only; warnings and errors are always printed.
"""

from typing import Any, Optional
from rich.console import Console

_console = Console()
_verbose = False
_web_mode = False

# level -> (rich style, console prefix, printed without --verbose)
_LEVELS = {
    "call": ("dim", "", False),
    "result": ("dim", "", False),
    "info": ("dim", "", False),
    "warning": ("yellow", "⚠ ", True),
    "error": ("red", "✗ ", True),
}


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def set_web_mode(enabled: bool) -> None:
    """Mirrors log entries into the web log buffer."""
    global _web_mode
    _web_mode = enabled


def _shorten(value: Any, limit: int) -> str:
    text = str(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _emit(level: str, message: str, data: Optional[dict] = None) -> None:
    if _web_mode:
        from trackline.web.state import log_buffer
        log_buffer.add(level, message, data)

    style, prefix, always = _LEVELS[level]
    if always or _verbose:
        _console.print(f"  [{style}]{prefix}{message}[/{style}]")


def log_call(service: str, method: str, **kwargs: Any) -> None:
    """Logs a service call with its parameters.

    Args:
        service: Service name (e.g. "LocationStore")
        method: Method name (e.g. "append")
        **kwargs: Call parameters, None values are left out
    """
    params = {key: value for key, value in kwargs.items() if value is not None}
    shown = ", ".join(f"{key}={_shorten(value, 50)}" for key, value in params.items())
    _emit(
        "call",
        f"→ {service}.{method}({shown})",
        {"service": service, "method": method, "params": {k: str(v) for k, v in params.items()}},
    )


def log_result(service: str, method: str, result: Any) -> None:
    """Logs the result of a service call."""
    _emit(
        "result",
        f"← {service}.{method} = {_shorten(result, 80)}",
        {"service": service, "method": method, "result": str(result)},
    )


def log_info(message: str) -> None:
    _emit("info", message)


def log_warning(message: str) -> None:
    _emit("warning", message)


def log_error(message: str) -> None:
    _emit("error", message)
