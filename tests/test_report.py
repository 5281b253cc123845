from __future__ import annotations

import json
import unittest

from accessstats.report import render, render_json
from accessstats.statistics import SummaryStatistics


class ReportTests(unittest.TestCase):
    def test_golden_output(self) -> None:
        stats = SummaryStatistics()
        for path, status, duration in (
            ("/orders.php", "500", 300000),
            ("/orders.html", "401", 100000),
            ("/orders.php", "200", 200000),
            ("/orders.html", "200", 200000),
            ("/orders.php", "200", 400000),
        ):
            stats.record_status(path, status)
            stats.record_duration(duration)

        expected = (
            "Max time: 0.4 secs\n"
            "Average time: 0.24 secs\n"
            "Path: /orders.php\n"
            "\t Code 200: 2\n"
            "\t Code 500: 1\n"
            "Path: /orders.html\n"
            "\t Code 200: 1\n"
            "\t Code 401: 1\n"
        )
        self.assertEqual(render(stats), expected)

    def test_no_requests(self) -> None:
        self.assertEqual(
            render(SummaryStatistics()),
            "Max time: no requests processed\nAverage time: no requests processed\n",
        )

    def test_json(self) -> None:
        stats = SummaryStatistics()
        stats.record_status("/orders.html", "200")
        stats.record_duration(500000)
        stats.excluded_lines = 2
        payload = json.loads(render_json(stats))
        self.assertEqual(payload["request_count"], 1)
        self.assertEqual(payload["max_time_seconds"], 0.5)
        self.assertEqual(payload["average_time_seconds"], 0.5)
        self.assertEqual(payload["paths"], [{"path": "/orders.html", "codes": {"200": 1}}])
        self.assertEqual(payload["excluded_lines"], 2)

    def test_json_without_requests(self) -> None:
        payload = json.loads(render_json(SummaryStatistics()))
        self.assertIsNone(payload["average_time_seconds"])
        self.assertEqual(payload["paths"], [])


if __name__ == "__main__":
    unittest.main()
