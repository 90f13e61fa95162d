"""Textual TUI for monitoring and controlling the Modbus slave."""

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, ScrollableContainer
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.widgets import Footer, Label, Static

from .store import Table

# Constants for heartbeat indicators
HEARTBEAT_ACTIVE = "●"
HEARTBEAT_INACTIVE = "○"

TABLE_TITLES = {
    Table.COILS: "Coils",
    Table.DISCRETE_INPUTS: "Discrete Inputs",
    Table.HOLDING_REGISTERS: "Holding Registers",
    Table.INPUT_REGISTERS: "Input Registers",
}


def format_value(table: Table, value) -> str:
    """Render one table cell."""
    if table.is_bit:
        if value:
            return "[black on green] ON  [/black on green]"
        return "[white on red] OFF [/white on red]"
    return f"{value:5d}  [dim]0x{value:04X}[/dim]"


class StatusWidget(Static):
    """Server/simulation status line with a change heartbeat."""

    beat = reactive(False)

    def compose(self) -> ComposeResult:
        with Horizontal(classes="status-row"):
            yield Static("[dim]Server stopped[/dim]", id="status_text", classes="status-text")
            yield Label("CHANGES:", classes="heartbeat-label")
            yield Label(HEARTBEAT_INACTIVE, id="change_indicator", classes="heartbeat-indicator")

    def watch_beat(self, value: bool) -> None:
        try:
            indicator = self.query_one("#change_indicator", Label)
        except NoMatches:
            return  # Not mounted yet
        indicator.update(HEARTBEAT_ACTIVE if value else HEARTBEAT_INACTIVE)

    def set_status(self, server_running: bool, simulation_running: bool, address: str, uptime: int) -> None:
        if server_running:
            server = f"[bold black on green] SERVING {address} [/bold black on green]"
        else:
            server = "[bold white on red] SERVER STOPPED [/bold white on red]"

        if simulation_running:
            simulation = f"[bold cyan]simulation running ({uptime}s)[/bold cyan]"
        else:
            simulation = "[dim]simulation stopped[/dim]"

        self.query_one("#status_text", Static).update(f"{server}  {simulation}")


class TableWidget(Static):
    """One store table as address/value rows."""

    def __init__(self, table: Table, **kwargs):
        super().__init__(**kwargs)
        self.table = table

    def compose(self) -> ComposeResult:
        yield Static(TABLE_TITLES[self.table], classes="section-title")
        yield Static("[dim]empty[/dim]", id=f"{self.table.key}_content", markup=True)

    def update_rows(self, rows: list) -> None:
        lines = [
            f"{row['address']:5d}  {format_value(self.table, row['value'])}"
            for row in rows
        ]
        content = self.query_one(f"#{self.table.key}_content", Static)
        content.update("\n".join(lines) if lines else "[dim]empty[/dim]")


class EventLogWidget(Static):
    """Widget showing system events with severity levels."""

    LEVEL_STYLES = {
        "CRITICAL": "bold white on red",
        "ERROR": "bold red",
        "WARNING": "bold yellow",
        "INFO": "bold cyan",
        "DEBUG": "dim",
    }

    def compose(self) -> ComposeResult:
        yield Static("[dim]No events yet[/dim]", id="event_content", markup=True)

    def update_events(self, events: list) -> None:
        """Show events newest first."""
        lines = []
        for event in reversed(events):
            style = self.LEVEL_STYLES.get(event.level, "bold")
            lines.append(
                f"[dim]{event.get_formatted_time()}[/dim] [{style}]{event.level:8}[/{style}] {event.message}"
            )

        event_content = self.query_one("#event_content", Static)
        event_content.update("\n".join(lines) if lines else "[dim]No events yet[/dim]")


class SlaveTUI(App):
    """Textual TUI for the Modbus slave."""

    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        height: 100%;
        padding: 1;
    }

    #status-container {
        height: auto;
        border: solid $error;
        padding: 0 1;
        margin-bottom: 1;
    }

    .status-row {
        height: auto;
    }

    .status-text {
        width: 1fr;
    }

    .heartbeat-label {
        color: $text;
        margin-left: 1;
    }

    .heartbeat-indicator {
        color: $warning;
        margin-right: 1;
    }

    #tables-row {
        height: auto;
        max-height: 24;
        margin-bottom: 1;
    }

    TableWidget {
        width: 1fr;
        height: auto;
        border: solid $primary;
        padding: 0 1;
        overflow-y: auto;
    }

    .section-title {
        text-style: bold;
        color: $accent;
        margin-bottom: 1;
    }

    #event-log-container {
        height: auto;
        max-height: 20;
        border: solid $warning;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("s", "toggle_server", "Start/stop server"),
        ("m", "toggle_simulation", "Start/stop simulation"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, controller, config=None, **kwargs):
        """Initialize TUI.

        Args:
            controller: SlaveController instance
            config: Application configuration (optional)
        """
        super().__init__(**kwargs)
        self.controller = controller
        self.config = config
        self.status_widget = None
        self.table_widgets = {}
        self.event_widget = None
        self.last_heartbeat = 0

    def compose(self) -> ComposeResult:
        with ScrollableContainer(id="main-container"):
            with Container(id="status-container"):
                self.status_widget = StatusWidget()
                yield self.status_widget

            with Horizontal(id="tables-row"):
                for table in Table:
                    widget = TableWidget(table)
                    self.table_widgets[table] = widget
                    yield widget

            with ScrollableContainer(id="event-log-container"):
                yield Static("System Log", classes="section-title")
                self.event_widget = EventLogWidget()
                yield self.event_widget

        yield Footer()

    async def on_mount(self) -> None:
        tui_config = self.config.tui if self.config else None
        render_rate = tui_config.poll_rate if tui_config else 0.25
        log_refresh_rate = tui_config.log_refresh_rate if tui_config else 1.0

        self.set_interval(render_rate, self.render_state)
        self.set_interval(log_refresh_rate, self.update_log_display)
        self.set_interval(0.5, self.reset_heartbeat)
        self.render_state()

    def action_toggle_server(self) -> None:
        if self.controller.server.is_running:
            self.controller.stop_server()
        else:
            self.controller.start_server()
        self.render_state()

    def action_toggle_simulation(self) -> None:
        simulator = self.controller.simulator
        if simulator and simulator.is_running:
            self.controller.stop_simulation()
        else:
            self.controller.start_simulation()
        self.render_state()

    def render_state(self) -> None:
        """Render widgets from the shared state snapshot (never blocks on I/O)."""
        snapshot = self.controller.state.get_snapshot()

        simulator = self.controller.simulator
        uptime = simulator.uptime() if simulator else 0
        self.status_widget.set_status(
            snapshot['server_running'],
            snapshot['simulation_running'],
            self.controller.server.describe(),
            uptime,
        )

        if snapshot['heartbeat'] != self.last_heartbeat:
            self.last_heartbeat = snapshot['heartbeat']
            self.status_widget.beat = True

        for table, widget in self.table_widgets.items():
            widget.update_rows(snapshot['tables'].get(table.key, []))

    def update_log_display(self) -> None:
        events = self.controller.log_manager.get_recent_events(count=200)
        self.event_widget.update_events(events)

    def reset_heartbeat(self) -> None:
        self.status_widget.beat = False


def run_tui(controller, config=None):
    """Run the Textual TUI (blocking)."""
    app = SlaveTUI(controller=controller, config=config)
    app.run()
