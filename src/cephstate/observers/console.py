# src/cephstate/observers/console.py
import typer

from .events import BaseEvent, ResourceEvent, ResourceFailed


class ConsoleObserver:
    def notify(self, event: BaseEvent) -> None:
        if isinstance(event, ResourceEvent):
            typer.echo(f"  {event.kind:<6} {event.name:<32} {event.message}")
        elif isinstance(event, ResourceFailed):
            typer.secho(f"  {event.kind:<6} {event.name:<32} FAILED: {event.error}", fg=typer.colors.RED)
        else:
            d = event.dict()
            typer.echo(f"[{d['ts']}] {event.__class__.__name__} "
                       + " ".join(f"{x}={y}" for x, y in d.items() if x not in ("ts", "run_id", "env", "cluster")))
