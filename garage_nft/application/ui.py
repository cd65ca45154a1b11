"""
Application Layer: UI Dashboard
Renders market analytics using 'rich' library.
"""
import datetime
from typing import List, Optional

from rich import box
from rich.console import Console, RenderableType
from rich.layout import Layout
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from garage_nft.domain import CollectionSummary, DashboardSnapshot, Network

CURRENCY = "FUEL"


class DashboardService:
    """
    Manages the terminal UI.
    Uses rich.live to update the screen without flickering.
    """
    def __init__(self, network: Network = Network.MAINNET, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.network = network
        self.layout = Layout()
        self.start_time = datetime.datetime.now()

        # State
        self.snapshot: Optional[DashboardSnapshot] = None
        self.refresh_count = 0
        self.logs: List[str] = []
        self.active = False
        self._live: Optional[Live] = None
        self._init_layout()

    def start(self) -> None:
        """Starts the Live display, releasing any previous handle first"""
        self.stop()
        self.active = True
        self._update_layout()
        self._live = Live(self.layout, console=self.console, refresh_per_second=4, screen=True)
        self._live.start()

    def stop(self) -> None:
        """Stops the Live display"""
        self.active = False
        if self._live:
            self._live.stop()
            self._live = None

    def show_snapshot(self, snapshot: DashboardSnapshot) -> None:
        """Replaces the whole view with a new refresh result"""
        self.snapshot = snapshot
        self.refresh_count += 1
        if snapshot.ok:
            self.add_log(f"Loaded {len(snapshot.collections)} collections", "INFO")
        else:
            self.add_log(snapshot.error or "Refresh failed", "ERROR")
        self._update_layout()

    def add_log(self, message: str, level: str = "INFO") -> None:
        """Adds a log message to the log panel"""
        timestamp = datetime.datetime.now().strftime("%H:%M:%S")
        color = "green"
        if level == "WARNING": color = "yellow"
        if level == "ERROR": color = "red"

        formatted_msg = f"[{color}][{timestamp}] {message}[/{color}]"
        self.logs.append(formatted_msg)
        if len(self.logs) > 10: # Keep last 10 logs
            self.logs.pop(0)

        if self.active:
            self._update_layout()

    def _init_layout(self) -> None:
        """Splits screen into sections"""
        self.layout.split(
            Layout(name="header", size=3),
            Layout(name="stats", size=6),
            Layout(name="main", ratio=1),
            Layout(name="footer", size=8)
        )
        self.layout["main"].split_row(
            Layout(name="rankings", ratio=2),
            Layout(name="share", ratio=1),
        )

    def _update_layout(self) -> None:
        """Re-renders all panels"""
        self.layout["header"].update(self._make_header())
        self.layout["footer"].update(self._make_log_panel())

        snapshot = self.snapshot
        if snapshot is not None and not snapshot.ok:
            error = self._make_error_panel(snapshot.error or "")
            self.layout["stats"].update(error)
            self.layout["rankings"].update(error)
            self.layout["share"].update(self._make_share_panel(None))
            return

        self.layout["stats"].update(self._make_stats_panel(snapshot))
        self.layout["rankings"].update(self._make_rankings_panel(snapshot))
        self.layout["share"].update(self._make_share_panel(snapshot))

    def _make_header(self) -> Panel:
        uptime = str(datetime.datetime.now() - self.start_time).split('.')[0]
        updated = self.snapshot.fetched_at if self.snapshot else "never"

        grid = Table.grid(expand=True)
        grid.add_column(justify="left", ratio=1)
        grid.add_column(justify="right", ratio=1)

        grid.add_row(
            f"🏎️  [bold blue]Garage Analytics[/bold blue] | {self.network.value} | Refreshes: {self.refresh_count}",
            f"Last updated: [bold green]{updated}[/bold green] | Uptime: {uptime}"
        )
        return Panel(grid, style="white on blue")

    def _make_stats_panel(self, snapshot: Optional[DashboardSnapshot]) -> Panel:
        if snapshot is None:
            return Panel(Text("Loading marketplace data...", style="dim"), title="Market Overview")

        stats = snapshot.stats
        grid = Table.grid(expand=True)
        for _ in range(4):
            grid.add_column(justify="center", ratio=1)
        grid.add_row(
            f"[bold]{stats.total_volume:.2f}[/bold]",
            f"[bold]{stats.total_sales:,}[/bold]",
            f"[bold]{stats.avg_floor_price:.2f}[/bold]",
            f"[bold]{stats.active_count}[/bold]",
        )
        grid.add_row(
            f"Total Volume ({CURRENCY})",
            "Total Sales",
            f"Avg Floor Price ({CURRENCY})",
            "Active Collections",
        )
        return Panel(grid, title="Market Overview", border_style="blue")

    def _make_rankings_panel(self, snapshot: Optional[DashboardSnapshot]) -> Panel:
        table = Table(box=box.SIMPLE, expand=True)
        table.add_column("#", justify="right", style="bold", width=3)
        table.add_column("🔥 Top Volume", style="cyan")
        table.add_column("💎 Highest Floor", style="magenta")
        table.add_column("📈 Most Sales", style="green")

        if snapshot is None or not snapshot.collections:
            table.add_row("", "Waiting for data...", "", "")
            return Panel(table, title="Rankings", border_style="blue")

        rows = max(len(snapshot.top_volume), len(snapshot.top_floor_price), len(snapshot.top_sales))
        for i in range(rows):
            table.add_row(
                str(i + 1),
                _cell(snapshot.top_volume, i, lambda c: f"{c.volume:.2f} {CURRENCY}"),
                _cell(snapshot.top_floor_price, i, lambda c: f"{c.floor_price:.2f} {CURRENCY}"),
                _cell(snapshot.top_sales, i, lambda c: f"{c.sales:,} sales"),
            )
        return Panel(table, title="Rankings", border_style="blue")

    def _make_share_panel(self, snapshot: Optional[DashboardSnapshot]) -> Panel:
        table = Table(show_header=True, box=box.SIMPLE, expand=True)
        table.add_column("Collection", style="cyan")
        table.add_column("Share", justify="right")

        if snapshot is not None:
            for share in snapshot.market_share:
                table.add_row(escape(share.name), f"{share.percent}%")
        return Panel(table, title="📊 Market Share (Volume)", border_style="green", box=box.ROUNDED)

    def _make_error_panel(self, message: str) -> Panel:
        return Panel(Text.from_markup(f"[bold red]Error:[/bold red] {escape(message)}"), border_style="red")

    def _make_log_panel(self) -> Panel:
        log_text = "\n".join(self.logs)
        return Panel(Text.from_markup(log_text), title="Activity Log", border_style="grey50")

    def render(self) -> RenderableType:
        self._update_layout()
        return self.layout


def _cell(items: List[CollectionSummary], index: int, value) -> str:
    if index >= len(items):
        return ""
    item = items[index]
    return f"{escape(item.name)}  [dim]{value(item)}[/dim]"
