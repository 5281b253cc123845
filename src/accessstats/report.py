from __future__ import annotations

from typing import List, Optional

from accessstats.statistics import SummaryStatistics

NO_REQUESTS = "no requests processed"


def _seconds(value: Optional[float]) -> str:
    if value is None:
        return NO_REQUESTS
    return f"{value!r} secs"


def render_lines(stats: SummaryStatistics) -> List[str]:
    out = [
        f"Max time: {_seconds(stats.max_time_seconds)}",
        f"Average time: {_seconds(stats.average_time_seconds)}",
    ]
    # paths keep first-seen order, codes are sorted within each path
    for path in stats.path_status_counts:
        out.append(f"Path: {path}")
        for code, count in stats.sorted_status_counts(path):
            out.append(f"\t Code {code}: {count}")
    return out


def render(stats: SummaryStatistics) -> str:
    return "\n".join(render_lines(stats)) + "\n"


def render_json(stats: SummaryStatistics, indent: Optional[int] = 2) -> str:
    return stats.to_model().model_dump_json(indent=indent)
