"""
Web application for SafeRails Train Separation

Interactive dashboard that drives the separation simulator from a browser
interval timer and draws both trains on the demo loop.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import dash
from dash import dcc, html, Input, Output
import plotly.graph_objs as go

from saferails import (
    SafeRailsError,
    SeparationSimulator,
    SimulationConfig,
    SimulatorStatus,
    TickClock,
    Track,
    demo_track,
)
from saferails.scenario import default_agents

log = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 50

AGENT_COLORS = {"A": "#0b74ff", "B": "#ff8a00"}
STATIONS = {"Central": (140, 420), "Harbor": (860, 120), "Midtown": (520, 320)}
SIGNALS = [(200, 440), (520, 300), (860, 160)]

MSG_IDLE = "Idle - ready to run"
MSG_STARTING = "Starting..."
MSG_RUNNING = "Running - all clear"
MSG_BRAKED = "Warning: Trains too close - automatic braking engaged"
MSG_PAUSED = "Paused"
MSG_RESET = "Reset - ready"
MSG_SWAPPED = "Direction swapped"


class SafeRailsHost:
    """Presentation-side wrapper: owns the simulator, the frame clock and the status line"""

    def __init__(self, config: Optional[SimulationConfig] = None, track: Optional[Track] = None) -> None:
        self.config = config if config is not None else SimulationConfig()
        self.track = track if track is not None else demo_track(self.config.track_length_m)
        self.speed = self.config.default_speed
        self.simulator = SeparationSimulator(self.track, default_agents(self.speed), config=self.config)
        self.clock = TickClock()
        self.message = MSG_IDLE

    def command(self, name: str) -> str:
        """Apply a button command and return the status line"""
        if name == "start":
            self.simulator.start()
            self.message = MSG_STARTING
        elif name == "pause":
            if self.simulator.is_running:
                self.simulator.pause()
                self.message = MSG_PAUSED
        elif name == "reset":
            self.simulator.reset()
            self.message = MSG_RESET
        elif name == "swap":
            self.simulator.swap_directions()
            self.message = MSG_SWAPPED
        else:
            raise ValueError(f"unknown command {name!r}")
        return self.message

    def set_speed(self, speed: float) -> None:
        self.simulator.set_all_speeds(speed)
        self.speed = speed

    def on_frame(self, now: float) -> str:
        """Advance by the time since the previous frame while running"""
        dt = self.clock.tick(now)
        if self.simulator.is_running:
            result = self.simulator.advance(dt)
            self.message = MSG_BRAKED if result.event.is_violation else MSG_RUNNING
        return self.message

    def status(self) -> SimulatorStatus:
        return self.simulator.current_status()


def track_figure(track: Track, status: SimulatorStatus) -> go.Figure:
    """Draw the loop, stations, signals and train markers"""
    fig = go.Figure()
    pts = track.points
    fig.add_trace(
        go.Scatter(
            x=pts[:, 0],
            y=pts[:, 1],
            mode="lines",
            name="Track",
            line=dict(color="#444", width=6),
            hoverinfo="skip",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[p[0] for p in STATIONS.values()],
            y=[p[1] for p in STATIONS.values()],
            mode="markers+text",
            name="Stations",
            text=list(STATIONS),
            textposition="bottom center",
            marker=dict(symbol="square", size=18, color="white", line=dict(color="#cbd5e1", width=2)),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[p[0] for p in SIGNALS],
            y=[p[1] for p in SIGNALS],
            mode="markers",
            name="Signal (GO)",
            marker=dict(size=12, color="#22c55e"),
            hoverinfo="skip",
        )
    )

    for agent_id, (position, direction) in status.positions.items():
        x, y = track.point_at(position)
        heading = track.heading_at(position)
        # Marker angle is clockwise from up; the y axis is flipped to match
        # drawing coordinates
        angle = heading + 90.0 + (180.0 if direction < 0 else 0.0)
        fig.add_trace(
            go.Scatter(
                x=[x],
                y=[y],
                mode="markers",
                name=f"Train {agent_id}",
                marker=dict(
                    symbol="arrow",
                    angle=angle,
                    size=22,
                    color=AGENT_COLORS.get(agent_id, "#6b7280"),
                    line=dict(color="#111", width=1),
                ),
                hovertemplate=f"Train {agent_id}<br>Position: {position:.3f}<extra></extra>",
            )
        )

    fig.update_layout(
        xaxis=dict(range=[0, 1000], visible=False),
        yaxis=dict(range=[600, 0], visible=False, scaleanchor="x"),
        height=520,
        margin=dict(l=10, r=10, t=10, b=10),
        template="plotly_white",
        legend=dict(orientation="h"),
    )
    return fig


def readouts(host: SafeRailsHost) -> List[Any]:
    """Status, distance and speed text plus start/pause button states"""
    status = host.status()
    running = host.simulator.is_running
    return [
        f"Status: {host.message}",
        f"Distance (approx): {round(status.min_distance_m)} m",
        f"Speed: {host.speed * 100:.1f}% /s",
        running,
        not running,
    ]


host = SafeRailsHost()

# Initialize Dash app
app = dash.Dash(__name__)
app.title = "SafeRails - Train Separation"

STAT_STYLE: Dict[str, Any] = {"backgroundColor": "#f3f4f6", "padding": "8px 12px", "borderRadius": "8px"}
BUTTON_STYLE: Dict[str, Any] = {
    "backgroundColor": "#0b74ff", "color": "white", "border": "none",
    "padding": "8px 12px", "borderRadius": "8px", "cursor": "pointer", "marginRight": "10px",
}

app.layout = html.Div([
    html.H1("SafeRails - Train Separation Control",
            style={"fontSize": "22px", "fontWeight": "700", "marginBottom": "8px"}),

    html.Div([
        html.Button("Start", id="start-button", style=BUTTON_STYLE),
        html.Button("Pause", id="pause-button", style=BUTTON_STYLE, disabled=True),
        html.Button("Reset", id="reset-button", style=BUTTON_STYLE),
        html.Button("Swap Directions", id="swap-button",
                    style={**BUTTON_STYLE, "backgroundColor": "#ff4d4f"}),
        html.Div(id="status-message", style={**STAT_STYLE, "marginLeft": "12px"}),
    ], style={"display": "flex", "alignItems": "center", "marginBottom": "10px"}),

    html.Div([
        html.Label("Speed:", style={"marginRight": "8px"}),
        html.Div(
            dcc.Slider(
                id="speed-slider",
                min=host.config.speed_min,
                max=host.config.speed_max,
                step=host.config.speed_step,
                value=host.speed,
                marks=None,
            ),
            style={"width": "260px"},
        ),
        html.Div(id="speed-readout", style={**STAT_STYLE, "marginLeft": "12px"}),
        html.Div(id="distance-readout", style={**STAT_STYLE, "marginLeft": "12px"}),
    ], style={"display": "flex", "alignItems": "center", "marginBottom": "10px"}),

    dcc.Graph(id="track-graph", figure=track_figure(host.track, host.status()),
              config={"displayModeBar": False}),
    dcc.Interval(id="frame-interval", interval=FRAME_INTERVAL_MS, n_intervals=0),
], style={"maxWidth": "900px", "margin": "0 auto", "padding": "18px",
          "fontFamily": "Inter, system-ui, -apple-system, 'Segoe UI', Roboto, Arial"})


@app.callback(
    [
        Output("track-graph", "figure"),
        Output("status-message", "children"),
        Output("distance-readout", "children"),
        Output("speed-readout", "children"),
        Output("start-button", "disabled"),
        Output("pause-button", "disabled"),
    ],
    [
        Input("frame-interval", "n_intervals"),
        Input("start-button", "n_clicks"),
        Input("pause-button", "n_clicks"),
        Input("reset-button", "n_clicks"),
        Input("swap-button", "n_clicks"),
        Input("speed-slider", "value"),
    ],
)
def update_view(
    n_intervals: int, start: int | None, pause: int | None, reset: int | None,
    swap: int | None, speed: float | None,
) -> List[Any]:
    """Route button presses, slider moves and frame ticks to the simulator"""
    trigger = dash.ctx.triggered_id
    try:
        if trigger in ("start-button", "pause-button", "reset-button", "swap-button"):
            host.command(trigger.split("-")[0])
        elif trigger == "speed-slider" and speed is not None:
            host.set_speed(speed)
        else:
            host.on_frame(time.monotonic())
    except SafeRailsError as e:
        log.error("command rejected: %s", e)
        host.message = f"Error: {e}"

    return [track_figure(host.track, host.status())] + readouts(host)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(debug=True, port=8050)
