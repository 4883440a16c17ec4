from __future__ import annotations

import logging
from typing import Any, Dict

import structlog
from rich.logging import RichHandler
from rich.markup import escape

_LEVEL_STYLES = {
    "critical": "bold red",
    "error": "bold red",
    "warning": "yellow",
    "debug": "dim",
}


def configure_logging(level: str) -> None:
    """
    Console logs for the CLI: one line per notification lifecycle event.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(markup=True, show_path=False, rich_tracebacks=True)],
    )

    # filelock logs every acquire/release at DEBUG.
    logging.getLogger("filelock").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            render_line,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        cache_logger_on_first_use=True,
    )


def get_logger(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger().bind(**kwargs)


def render_line(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> str:
    """
    "[namespace] event_name event key=value ..." with the component dropped;
    the namespace and event name are what a reader scans for.
    """
    event_dict = dict(event_dict)
    event = str(event_dict.pop("event", method_name))
    level = str(event_dict.pop("level", method_name)).lower()
    event_dict.pop("component", None)

    head = event
    name = event_dict.pop("event_name", None)
    if name is not None:
        head = "%s %s" % (name, head)
    ns = event_dict.pop("namespace", None)
    if ns is not None:
        head = "[%s] %s" % (ns, head)

    text = escape(" ".join([head] + ["%s=%s" % (k, event_dict[k]) for k in sorted(event_dict)]))
    style = _LEVEL_STYLES.get(level)
    if style is None:
        return text
    return "[%s]%s[/]" % (style, text)
