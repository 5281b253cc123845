"""Running per-path status counts and latency totals for one access log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from accessstats.line_parser import ParsedRecord

NO_DURATION = -1
MICROS_PER_SECOND = 1_000_000.0


class PathSummary(BaseModel):
    path: str
    codes: Dict[str, int] = Field(default_factory=dict)


class SummaryModel(BaseModel):
    request_count: int
    max_time_seconds: Optional[float] = None
    average_time_seconds: Optional[float] = None
    paths: List[PathSummary] = Field(default_factory=list)
    excluded_lines: int = 0
    rejected_lines: int = 0


@dataclass
class SummaryStatistics:
    # {"/orders.html": {"200": 55, "401": 12}, "/orders.php": {"200": 23}}
    path_status_counts: Dict[str, Dict[str, int]] = field(default_factory=dict)
    request_count: int = 0
    max_duration_micros: int = NO_DURATION
    duration_sum_micros: int = 0
    excluded_lines: int = 0
    rejected_lines: int = 0

    def record_status(self, path: str, status: str) -> None:
        codes = self.path_status_counts.get(path)
        if codes is None:
            codes = {}
            self.path_status_counts[path] = codes
        codes[status] = codes.get(status, 0) + 1

    def record_duration(self, duration_micros: int) -> None:
        self.request_count += 1
        self.max_duration_micros = max(self.max_duration_micros, duration_micros)
        self.duration_sum_micros += duration_micros

    def record(self, parsed: ParsedRecord) -> None:
        self.record_status(parsed.path, parsed.status)
        self.record_duration(parsed.duration_micros)

    @property
    def max_time_seconds(self) -> Optional[float]:
        if self.request_count == 0:
            return None
        return self.max_duration_micros / MICROS_PER_SECOND

    @property
    def average_time_seconds(self) -> Optional[float]:
        if self.request_count == 0:
            return None
        return self.duration_sum_micros / self.request_count / MICROS_PER_SECOND

    def sorted_status_counts(self, path: str) -> List[Tuple[str, int]]:
        return sorted(self.path_status_counts.get(path, {}).items())

    def to_model(self) -> SummaryModel:
        return SummaryModel(
            request_count=self.request_count,
            max_time_seconds=self.max_time_seconds,
            average_time_seconds=self.average_time_seconds,
            paths=[
                PathSummary(path=path, codes=dict(self.sorted_status_counts(path)))
                for path in self.path_status_counts
            ],
            excluded_lines=self.excluded_lines,
            rejected_lines=self.rejected_lines,
        )
