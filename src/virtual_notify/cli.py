from __future__ import annotations

from typing import List, Optional

import typer

from virtual_notify.config import NotifySettings
from virtual_notify.core.logging import configure_logging, get_logger
from virtual_notify.errors import NextTimeout, VirtualNotifyError
from virtual_notify.notify import VirtualNotify, wait_for_event

app = typer.Typer(no_args_is_help=True)


def _settings(base_dir: Optional[str]) -> NotifySettings:
    settings = NotifySettings()
    if base_dir:
        settings = settings.model_copy(update={"base_dir": base_dir})
    configure_logging(settings.log_level)
    return settings


@app.command()
def pub(
    namespace: str = typer.Argument("test", help="Namespace"),
    event: str = typer.Argument("e1", help="Event name"),
    timeout: float = typer.Option(0.0, "--timeout", help="Wait up to N seconds for a subscriber (0 = fire and forget)"),
    base_dir: Optional[str] = typer.Option(None, "--dir", help="Shared directory (default: VIRTUAL_NOTIFY_DIR or temp dir)"),
) -> None:
    """Publish EVENT in NAMESPACE."""
    settings = _settings(base_dir)
    log = get_logger(component="cli", namespace=namespace)
    vn = VirtualNotify(namespace, settings=settings)
    try:
        armed = vn.publish(event, timeout=timeout or None)
    except VirtualNotifyError as e:
        log.error("publish_failed", event_name=event, error=str(e))
        raise typer.Exit(code=1)
    finally:
        vn.close()
    log.info("published", event_name=event, armed=armed)


@app.command()
def sub(
    namespace: str = typer.Argument("test", help="Namespace"),
    events: List[str] = typer.Argument(None, help="Event names (default: e1)"),
    interval: float = typer.Option(0.5, "--interval", help="Poll interval in seconds"),
    count: int = typer.Option(0, "--count", help="Exit after N events (0 = run until interrupted)"),
    base_dir: Optional[str] = typer.Option(None, "--dir", help="Shared directory (default: VIRTUAL_NOTIFY_DIR or temp dir)"),
) -> None:
    """Subscribe to EVENTS in NAMESPACE and print each one as it fires."""
    settings = _settings(base_dir)
    log = get_logger(component="cli", namespace=namespace)
    names = list(events or ["e1"])

    with VirtualNotify(namespace, settings=settings) as vn:
        try:
            for name in names:
                vn.subscribe(name)
        except VirtualNotifyError as e:
            log.error("subscribe_failed", error=str(e))
            raise typer.Exit(code=1)

        vn.start(interval)
        seen = 0
        try:
            for ev in vn:
                log.info("event", event_name=ev.name)
                typer.echo(ev.name)
                seen += 1
                if count and seen >= count:
                    break
        except KeyboardInterrupt:
            log.warning("shutdown_requested")
        if vn.last_error is not None:
            log.error("poller_failed", error=str(vn.last_error))
            raise typer.Exit(code=1)


@app.command()
def wait(
    namespace: str = typer.Argument("test", help="Namespace"),
    event: str = typer.Argument("e1", help="Event name"),
    timeout: float = typer.Option(0.0, "--timeout", help="Give up after N seconds (0 = wait forever)"),
    interval: float = typer.Option(0.1, "--interval", help="Poll interval in seconds"),
    base_dir: Optional[str] = typer.Option(None, "--dir", help="Shared directory (default: VIRTUAL_NOTIFY_DIR or temp dir)"),
) -> None:
    """Block until EVENT fires once in NAMESPACE."""
    settings = _settings(base_dir)
    log = get_logger(component="cli", namespace=namespace)
    try:
        wait_for_event(namespace, event, interval=interval, timeout=timeout or None, settings=settings)
    except NextTimeout:
        log.warning("wait_timed_out", event_name=event, timeout=timeout)
        raise typer.Exit(code=2)
    except VirtualNotifyError as e:
        log.error("wait_failed", event_name=event, error=str(e))
        raise typer.Exit(code=1)
    typer.echo(event)
