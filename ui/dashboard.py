"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock
from typing import Any

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log, write_outbound_log

console = Console()


class ForwardInfo:
    """Info about a single completed forward."""

    def __init__(self, method: str, url: str, status: int, timestamp: datetime):
        self.method = method
        self.url = url[:80] + "..." if len(url) > 80 else url
        self.status = status
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent forwards and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[ForwardInfo] = []
        self._max_recent = 10
        self._counts = {"forwarded": 0, "errors": 0, "skipped_headers": 0}
        self._errors: list[str] = []
        self._upstream = "direct"
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_forward(self, method: str, url: str, headers: list[tuple[str, str]]) -> None:
        """Log an outbound request about to be sent."""
        with self._lock:
            self._counts["forwarded"] += 1
            write_cli_log("FORWARD", f"Proxying {method} request to: {url}")
            if self.config.proxy.debug:
                write_outbound_log(method, url, headers)
            self._refresh()

    def log_response(self, method: str, url: str, status: int) -> None:
        """Log a relayed outbound response."""
        with self._lock:
            self._recent.insert(0, ForwardInfo(method, url, status, datetime.now()))
            self._recent = self._recent[: self._max_recent]
            write_cli_log("RESPONSE", f"Proxied {method} {url}", status=status)
            self._refresh()

    def log_error(self, kind: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._counts["errors"] += 1
            truncated = message[:60] + "..." if len(message) > 60 else message
            self._errors.insert(0, f"{kind} {status}: {truncated}")
            self._errors = self._errors[:3]
            write_cli_log("ERROR", message[:200], kind=kind, status=status)
            self._refresh()

    def log_skipped_header(self, direction: str, name: str) -> None:
        """Log a header dropped because it cannot be re-encoded."""
        with self._lock:
            self._counts["skipped_headers"] += 1
            write_cli_log("WARNING", "Skipped header that cannot be re-encoded", direction=direction, name=name)
            self._refresh()

    def log_event(self, level: str, message: str, **extra: Any) -> None:
        """Log a startup or informational event."""
        with self._lock:
            if "proxy" in extra:
                self._upstream = str(extra["proxy"])
            if level == "ERROR":
                self._errors.insert(0, message[:80])
                self._errors = self._errors[:3]
            if self._live is None:
                style = "red" if level == "ERROR" else "dim"
                console.print(f"[{style}][{level}][/{style}] {escape(message)}")
            write_cli_log(level, message, **extra)
            self._refresh()

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_recent_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Salt Proxier", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._counts['forwarded']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Errors: {self._counts['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Skipped headers: {self._counts['skipped_headers']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")
        stats.append("  |  ")
        stats.append(f"Upstream: {self._upstream}", style="dim")

        return Panel(stats, style="cyan")

    def _build_recent_panel(self) -> Panel:
        """Build recent forwards panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=8)
            table.add_column("Target", ratio=3)
            table.add_column("Status", width=6)

            for fwd in self._recent:
                status_style = "green" if fwd.status < 400 else "red"
                table.add_row(
                    fwd.timestamp.strftime("%H:%M:%S"),
                    fwd.method,
                    Text(fwd.url),
                    Text(str(fwd.status), style=status_style),
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent Forwards[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Send requests to http://localhost:{self.config.proxy.port} with a Salt-Host header",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
