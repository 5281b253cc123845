from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from accessstats import config
from accessstats.app import create_app, get_log_source
from accessstats.line_parser import LineParser
from accessstats.processor import LogProcessor
from accessstats.sources import LocalLogSource, object_key
from sample_log import gzip_bytes, make_line


class SummaryEndpointTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        lines = [
            make_line("GET /orders.html HTTP/1.1", "200", "100000"),
            make_line("GET /orders.html HTTP/1.1", "500", "300000"),
            make_line("GET /ok HTTP/1.1", "200", "50", user_agent="Ruby"),
            "garbage\n",
        ]
        Path(self.tmp.name, object_key("orders", "2024-01-31")).write_bytes(gzip_bytes(lines))

        self.app = create_app(access_log_path="")
        self.app.dependency_overrides[get_log_source] = lambda: LocalLogSource(self.tmp.name)
        self.client = TestClient(self.app)

    def test_health(self) -> None:
        resp = self.client.get("/ok")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"ok": True})

    def test_summary(self) -> None:
        resp = self.client.get("/summary/orders/2024-01-31")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["request_count"], 2)
        self.assertEqual(body["max_time_seconds"], 0.3)
        self.assertEqual(body["average_time_seconds"], 0.2)
        self.assertEqual(body["paths"], [{"path": "/orders.html", "codes": {"200": 1, "500": 1}}])
        self.assertEqual(body["excluded_lines"], 1)
        self.assertEqual(body["rejected_lines"], 1)

    def test_parser_shared_across_requests(self) -> None:
        parser = self.app.state.line_parser
        self.assertIsInstance(parser, LineParser)
        with patch.object(parser, "parse", wraps=parser.parse) as spy:
            for _ in range(2):
                self.assertEqual(self.client.get("/summary/orders/2024-01-31").status_code, 200)
        # four non-blank lines per request, all through the same instance
        self.assertEqual(spy.call_count, 8)

    def test_summary_strict(self) -> None:
        resp = self.client.get("/summary/orders/2024-01-31", params={"strict": "true"})
        self.assertEqual(resp.status_code, 422)
        self.assertIn("line 4", resp.json()["detail"])

    def test_missing_log(self) -> None:
        resp = self.client.get("/summary/orders/1999-01-01")
        self.assertEqual(resp.status_code, 404)

    def test_token_required_when_configured(self) -> None:
        with patch.object(config, "TOKEN", "s3cret"):
            self.assertEqual(self.client.get("/summary/orders/2024-01-31").status_code, 401)
            resp = self.client.get(
                "/summary/orders/2024-01-31",
                headers={"Authorization": "Bearer s3cret"},
            )
            self.assertEqual(resp.status_code, 200)


class AccessLogMiddlewareTests(unittest.TestCase):
    def test_written_lines_feed_back_into_processor(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp, "access.log")
            client = TestClient(create_app(access_log_path=str(log_path)))
            client.get("/ok", headers={"user-agent": "Ruby"})
            client.get("/ok", headers={"user-agent": 'Chrome "quoted"'})
            client.get("/missing?x=1", headers={"user-agent": "Ruby"})

            lines = log_path.read_text(encoding="utf-8").splitlines(keepends=True)
            self.assertEqual(len(lines), 3)

            parser = LineParser()
            first = parser.parse(lines[0])
            self.assertEqual(first.request, "GET /ok HTTP/1.1")
            self.assertEqual(first.user_agent, "Ruby")
            self.assertEqual(parser.parse(lines[1]).user_agent, 'Chrome "quoted"')

            stats = LogProcessor(parser, strict=True).process(lines)
            self.assertEqual(stats.excluded_lines, 1)
            self.assertEqual(stats.request_count, 2)
            self.assertEqual(stats.path_status_counts, {"/ok": {"200": 1}, "/missing?x=1": {"404": 1}})


if __name__ == "__main__":
    unittest.main()
