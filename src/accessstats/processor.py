from __future__ import annotations

import logging
from typing import Iterable, Optional

from accessstats.filters import should_exclude
from accessstats.line_parser import LineParser, ParseError
from accessstats.statistics import SummaryStatistics

log = logging.getLogger(__name__)


class LogProcessor:
    """
    Folds a line stream into SummaryStatistics in a single forward pass.

    With strict=False a malformed line is logged, counted in rejected_lines
    and skipped. With strict=True the ParseError propagates and no summary is
    returned. Errors raised by the line stream itself always propagate.
    """

    def __init__(self, parser: Optional[LineParser] = None, strict: bool = False) -> None:
        self.parser = parser or LineParser()
        self.strict = strict

    def process(self, lines: Iterable[str]) -> SummaryStatistics:
        stats = SummaryStatistics()
        for line_num, line in enumerate(lines, 1):
            if not line.strip():
                continue
            try:
                parsed = self.parser.parse(line, line_num)
            except ParseError as exc:
                if self.strict:
                    raise
                stats.rejected_lines += 1
                log.warning("skipping malformed line %s", exc)
                continue

            if should_exclude(parsed.user_agent, parsed.request):
                stats.excluded_lines += 1
                continue

            stats.record(parsed)

        log.info(
            "processed %d requests (%d health checks excluded, %d malformed lines skipped)",
            stats.request_count,
            stats.excluded_lines,
            stats.rejected_lines,
        )
        return stats
