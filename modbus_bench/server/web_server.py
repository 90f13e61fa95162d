"""Web dashboard and control API for the Modbus slave.

Read-only views stream ServerState snapshots over a WebSocket; the control
endpoints start/stop the server and the simulation and let an operator
force any seeded address to a value, the same way a field device would
change its inputs.
"""

import asyncio
from typing import Union

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, StrictBool, StrictInt

from .errors import AddressNotFound, IllegalValue
from .store import Table

DASHBOARD_HTML = """<!DOCTYPE html>
<html>
<head><title>Modbus Slave</title>
<style>
body { font-family: monospace; margin: 2em; }
table { border-collapse: collapse; margin-right: 2em; float: left; }
td, th { border: 1px solid #999; padding: 2px 8px; }
</style>
</head>
<body>
<h1>Modbus Slave</h1>
<p id="status"></p>
<div id="tables"></div>
<script>
const ws = new WebSocket(`ws://${location.host}/ws`);
ws.onmessage = (event) => {
  const state = JSON.parse(event.data);
  document.getElementById("status").textContent =
    `server: ${state.server_running ? "running" : "stopped"}, ` +
    `simulation: ${state.simulation_running ? "running" : "stopped"}`;
  let html = "";
  for (const [name, rows] of Object.entries(state.tables)) {
    html += `<table><tr><th colspan="2">${name}</th></tr>`;
    for (const row of rows) {
      html += `<tr><td>${row.address}</td><td>${row.value}</td></tr>`;
    }
    html += "</table>";
  }
  document.getElementById("tables").innerHTML = html;
};
</script>
</body>
</html>
"""


class ValueRequest(BaseModel):
    value: Union[StrictBool, StrictInt]


class WebDashboard:
    """FastAPI app exposing the slave state and controls."""

    def __init__(self, controller, log_manager, port: int = 7681):
        """Initialize web dashboard.

        Args:
            controller: SlaveController instance
            log_manager: LogManager instance
            port: Port to listen on
        """
        self.controller = controller
        self.log_manager = log_manager
        self.port = port
        self.app = FastAPI(title="Modbus Slave Dashboard")
        self.active_connections = []
        self._setup_routes()

    def _setup_routes(self):
        @self.app.get("/", response_class=HTMLResponse)
        async def root():
            return HTMLResponse(DASHBOARD_HTML)

        @self.app.get("/api/state")
        async def get_state():
            """Current state snapshot."""
            return self.controller.state.get_snapshot()

        @self.app.get("/api/tables/{table_key}")
        async def get_table(table_key: str):
            table = self._resolve_table(table_key)
            entries = self.controller.store.snapshot(table)
            return {
                'table': table.key,
                'entries': [{'address': address, 'value': value} for address, value in entries],
            }

        @self.app.post("/api/tables/{table_key}/{address}")
        async def set_value(table_key: str, address: int, request: ValueRequest):
            table = self._resolve_table(table_key)
            try:
                self.controller.store.set(table, address, request.value)
            except AddressNotFound as e:
                raise HTTPException(status_code=404, detail=str(e))
            except IllegalValue as e:
                raise HTTPException(status_code=422, detail=str(e))

            self.log_manager.info(f"Operator set {table} {address} = {request.value}")
            return {'success': True, 'table': table.key, 'address': address, 'value': request.value}

        @self.app.post("/api/server/{action}")
        def server_action(action: str):
            if action == "start":
                ok = self.controller.start_server()
            elif action == "stop":
                ok = self.controller.stop_server()
            else:
                raise HTTPException(status_code=404, detail=f"Unknown action: {action}")
            return {'success': ok}

        @self.app.post("/api/simulation/{action}")
        def simulation_action(action: str):
            if action == "start":
                ok = self.controller.start_simulation()
            elif action == "stop":
                ok = self.controller.stop_simulation()
            else:
                raise HTTPException(status_code=404, detail=f"Unknown action: {action}")
            return {'success': ok}

        @self.app.get("/api/logs")
        async def get_logs(count: int = 100):
            """Recent events and requests."""
            events = [
                {'timestamp': e.get_formatted_time(), 'level': e.level, 'message': e.message}
                for e in self.log_manager.get_recent_events(count=count)
            ]
            requests = [
                {'timestamp': r.get_formatted_time(), 'request': r.describe()}
                for r in self.log_manager.get_recent_requests(count=count)
            ]
            return {'logs': events, 'requests': requests}

        @self.app.websocket("/ws")
        async def websocket_endpoint(websocket: WebSocket):
            """Stream state snapshots (10 per second)."""
            await websocket.accept()
            self.active_connections.append(websocket)
            self.log_manager.info(f"Web client connected (total: {len(self.active_connections)})")

            try:
                while True:
                    await websocket.send_json(self.controller.state.get_snapshot())
                    await asyncio.sleep(0.1)
            except WebSocketDisconnect:
                self.log_manager.info(f"Web client disconnected (total: {len(self.active_connections) - 1})")
            finally:
                if websocket in self.active_connections:
                    self.active_connections.remove(websocket)

    @staticmethod
    def _resolve_table(table_key: str) -> Table:
        try:
            return Table.from_key(table_key)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"Unknown table: {table_key}")

    def run(self):
        """Run the web server (blocking)."""
        self.log_manager.info(f"Web dashboard: http://localhost:{self.port}")
        config = uvicorn.Config(
            self.app,
            host="0.0.0.0",
            port=self.port,
            log_level="warning",
            access_log=False
        )
        server = uvicorn.Server(config)
        server.run()


def run_web_dashboard(controller, log_manager, port: int = 7681):
    """Run web dashboard in current thread (blocking)."""
    dashboard = WebDashboard(controller, log_manager, port)
    dashboard.run()
