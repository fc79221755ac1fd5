#!/usr/bin/env python3
"""
history.py: Rich rendering of stored closing logs.

Each log returned by the log service is shown as a panel with its date, closer,
priority and a body listing the workstation notes and photo links.
"""

import json
from typing import Any, Dict, List, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from ..utils.log_utils import get_logger

logger = get_logger(__name__)

PRIORITY_STYLES = {
    "high": "bold white on red",
    "low": "bold white on green",
}
DEFAULT_PRIORITY_STYLE = "bold black on yellow"


def safe_parse_json(value: Any, fallback: Any) -> Any:
    """Parse a JSON string, returning `fallback` for bad or null input."""
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return fallback
    return fallback if parsed is None else parsed


def format_timestamp(ts: Optional[str]) -> str:
    """'2026-02-14T18:05:33.000Z' -> '2026-02-14 18:05'."""
    if not ts:
        return ""
    return str(ts).replace("T", " ")[:16]


def priority_style(priority: Optional[str]) -> str:
    return PRIORITY_STYLES.get(str(priority or "").lower(), DEFAULT_PRIORITY_STYLE)


def format_stations(stations_json: Any) -> str:
    stations = safe_parse_json(stations_json, [])
    if not isinstance(stations, list) or not stations:
        return "(no workstation updates)"

    blocks = []
    for st in stations:
        if not isinstance(st, dict):
            continue
        key = st.get("key") or ""
        notes = st.get("notes") or ""
        photo_url = st.get("photoUrl") or ""
        photo_line = f"\nPhoto: {photo_url}" if photo_url else ""
        blocks.append(f"{key}: {notes or '(no notes)'}{photo_line}")
    return "\n\n".join(blocks) if blocks else "(no workstation updates)"


def format_log_body(log: Dict[str, Any]) -> str:
    return (
        f"Priority: {log.get('priority') or 'Medium'}\n"
        f"Units on bench: {log.get('units_on_bench') or '-'}\n"
        f"Handoff: {log.get('handoff_notes') or '-'}\n"
        "\n"
        "Workstations:\n"
        f"{format_stations(log.get('stations_json'))}"
    )


def _log_panel(log: Dict[str, Any]) -> Panel:
    priority = log.get("priority") or "Medium"
    title = Text.assemble(
        (str(log.get("date") or ""), "bold"),
        f" ({log.get('closer') or ''}) ",
        (f" {priority} ", priority_style(priority)),
    )
    return Panel(
        Text(format_log_body(log)),
        title=title,
        title_align="left",
        subtitle=format_timestamp(log.get("timestamp")),
        subtitle_align="right",
        border_style="grey50",
    )


def render_history(logs: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """Print stored logs to `console` (a fresh Console if None)."""
    console = console or Console()
    if not logs:
        console.print("No logs yet.")
        return
    logger.debug("Rendering %d logs", len(logs))
    console.print(Group(*(_log_panel(log) for log in logs)))
