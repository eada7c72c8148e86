"""
MODULE OVERVIEW:
The Rich terminal dashboard for a watch stream.

WHAT IS HAPPENING HERE:
The stream is consumed in a background task; every notification and every status
change of the long-poll loop (WAITING, ACTIVE, RETRYING...) is pushed into small
ring buffers, and the Live layout is redrawn from them four times a second.
"""
import asyncio
from collections import deque
from datetime import datetime

from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from centraldogma.client.watch_client import Notification, WatchStream
from centraldogma.shared.models import WatchFileResult

def describe(notification: Notification) -> tuple[str, str]:
    """(path, content preview) for one row of the feed."""
    if isinstance(notification, WatchFileResult):
        content = str(notification.entry.content)
        preview = content[:40] + "..." if len(content) > 40 else content
        return notification.entry.path, preview
    return "-", "new commit"

def status_color(status: str) -> str:
    if status.startswith("ACTIVE"):
        return "green"
    if status in ("WAITING", "INITIALIZING"):
        return "yellow"
    return "red"

class Visualizer:
    def __init__(self, stream: WatchStream, feed_size: int = 10):
        self.stream = stream
        self.status = "INITIALIZING"
        self.feed = deque(maxlen=feed_size)
        self.transitions = deque(maxlen=5)

    def on_status_change(self, status: str):
        self.status = status
        self.transitions.appendleft(f"{datetime.now():%H:%M:%S}  {status}")

    def on_notification(self, notification: Notification):
        path, preview = describe(notification)
        self.feed.appendleft((f"{datetime.now():%H:%M:%S}", str(notification.revision), path, preview))

    def _feed_table(self) -> Table:
        table = Table(expand=True, show_edge=False)
        table.add_column("Seen at", style="cyan", no_wrap=True)
        table.add_column("Rev", style="magenta", justify="right")
        table.add_column("Path", style="blue")
        table.add_column("Preview", style="green")
        for row in self.feed:
            table.add_row(*row)
        return table

    def _stats_text(self) -> str:
        stats = self.stream.stats
        baseline = self.stream.state.last_known_revision
        return "\n".join(
            [
                f"Polls: {stats['polls']}",
                f"Changes: {stats['notifications_received']}",
                f"Unchanged: {stats['empty_responses']}",
                f"Retries: {stats['reconnect_count']}",
                f"Baseline rev: {'HEAD' if baseline is None else baseline}",
                f"Watching since: {stats['connected_at']}",
                f"Last change: {stats['last_event_at'] or '-'}",
            ]
        )

    def generate_layout(self) -> Layout:
        color = status_color(self.status)
        layout = Layout()
        layout.split_column(Layout(name="header", size=3), Layout(name="body"))
        layout["body"].split_row(Layout(name="feed", ratio=2), Layout(name="side", ratio=1))
        layout["side"].split_column(Layout(name="stats"), Layout(name="transitions"))

        layout["header"].update(Panel(f"[bold]{self.stream.target}[/]  [{color}]{self.status}[/]", border_style=color))
        layout["feed"].update(Panel(self._feed_table(), title="Changes"))
        layout["stats"].update(Panel(self._stats_text(), title="Stream"))
        layout["transitions"].update(Panel("\n".join(self.transitions), title="Status history"))
        return layout

    async def consume(self, duration_s: float) -> None:
        """Feeds notifications into the dashboard for `duration_s` seconds, then closes the stream."""
        async def drain():
            async for notification in self.stream:
                self.on_notification(notification)

        try:
            await asyncio.wait_for(drain(), timeout=duration_s)
        except asyncio.TimeoutError:
            pass
        finally:
            await self.stream.aclose()

    async def run(self, duration_s: float):
        async def status_hook(s): self.on_status_change(s)

        self.stream.set_status_callback(status_hook)
        consumer_task = asyncio.create_task(self.consume(duration_s))

        with Live(self.generate_layout(), refresh_per_second=4) as live:
            while not consumer_task.done():
                live.update(self.generate_layout())
                await asyncio.sleep(0.25)
            live.update(self.generate_layout())
        await consumer_task
