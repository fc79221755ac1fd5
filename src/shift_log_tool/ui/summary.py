from typing import List

from ..core.models import BasicInfo, StationEntry


def build_copy_summary(basic: BasicInfo, stations: List[StationEntry]) -> str:
    """Plain-text summary of a closing log, meant for pasting into chat."""
    lines = [
        f"Closing {basic.date}",
        f"Closer: {basic.closer or '-'}",
        f"Priority: {basic.priority or 'Medium'}",
        f"Units on bench: {basic.units_on_bench}",
    ]

    if stations:
        lines.append("")
        lines.append("Workstations:")
        for st in stations:
            lines.append(f"{st.key}: {st.notes or '(no notes)'}")

    if basic.handoff_notes:
        lines.append("")
        lines.append(f"Handoff: {basic.handoff_notes}")

    return "\n".join(lines)
