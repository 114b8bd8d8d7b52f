import time
from contextlib import contextmanager
from rich.console import Console
from rich.markup import escape

console = Console()
err_console = Console(stderr=True)


# Lightweight structured logging for transaction lifecycle only
def _log(event: str, **fields):
    parts = [f"{event}"]
    for k, v in fields.items():
        if v is not None:
            parts.append(f"{k}={v}")
    console.print(" ".join(parts), style="dim", markup=False, highlight=False)


def ok(msg: str):
    console.print(f"[green]{escape(msg)}[/green]")


def warn(msg: str):
    console.print(f"[yellow]{escape(msg)}[/yellow]")


def alert(msg: str):
    console.print(f"[red]{escape(msg)}[/red]")


def error(msg: str):
    err_console.print(f"[red]{escape(msg)}[/red]")


def rule(msg: str):
    console.print(f"\n[blue]{'-' * 53}[/blue]")
    console.print(f"[blue]{escape(msg)}[/blue]")
    console.print(f"[blue]{'-' * 53}[/blue]")


class Step:
    """Handle for a running spinner; mirrors the succeed/fail ending of a step line."""

    def __init__(self, status):
        self._status = status

    def update(self, msg: str, style: str = "cyan"):
        self._status.update(f"[{style}]{escape(msg)}[/{style}]")

    def succeed(self, msg: str):
        self._status.stop()
        console.print(f"[green]✔ {escape(msg)}[/green]")

    def fail(self, msg: str):
        self._status.stop()
        console.print(f"[red]✖ {escape(msg)}[/red]")


@contextmanager
def step(msg: str):
    status = console.status(f"[cyan]{escape(msg)}[/cyan]")
    status.start()
    try:
        yield Step(status)
    finally:
        status.stop()


def format_hms(seconds: int) -> str:
    h, rem = divmod(max(0, int(seconds)), 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def countdown(seconds: int, sleep=time.sleep):
    """Visible countdown, one tick per second. Returns the number of seconds waited."""
    waited = 0
    with step(f"Retrying in {format_hms(seconds)}") as s:
        remaining = int(seconds)
        while remaining > 0:
            s.update(f"Retrying in {format_hms(remaining)}", style="yellow")
            sleep(1)
            waited += 1
            remaining -= 1
        s.succeed("Countdown finished. Resuming operations...")
    return waited
