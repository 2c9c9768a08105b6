"""
Integration tests for the report lifecycle against a mock HTTP server.

Runs the real collectors, cache and uploader end to end. Interactive runs
are driven over OS pipes and read back with the line-or-question splitter.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
import unittest
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path

import pytest

from sysreport.cache import CacheStore
from sysreport.config import Config
from sysreport.core import ReportCore, ReportMode
from sysreport.errors import DuplicateReportError, SendError
from sysreport.metrics import EXPECTED_REPORT_ITEM, OPT_OUT_JSON
from sysreport.prompt import QUESTION, iter_tokens


class MockReportServer(BaseHTTPRequestHandler):
    """Records every POSTed body."""

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length else b""
        self.server.requests.append({"path": self.path, "data": body})

        self.send_response(self.server.status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(b'{"status": "ok"}')

    def log_message(self, format, *args):
        pass


class ReportServerTestCase(unittest.TestCase):
    """Starts a mock server and an isolated cache per test."""

    def setUp(self):
        self.server = HTTPServer(("localhost", 0), MockReportServer)
        self.server.requests = []
        self.server.status = 200
        thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        thread.start()
        self.addCleanup(self.server.server_close)
        self.addCleanup(self.server.shutdown)
        self.url = f"http://localhost:{self.server.server_port}/report"

        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.config = Config(upload_url=self.url, upload_timeout=5, cache_dir=self._tmp.name)
        self.namespace_dir = Path(self._tmp.name) / "sysreport"

    def report_file(self) -> Path:
        files = list(self.namespace_dir.iterdir())
        self.assertEqual(len(files), 1, files)
        return files[0]


@pytest.mark.integration
class TestNonInteractiveReport(ReportServerTestCase):
    """AUTO and OPT_OUT runs against the mock server."""

    def test_auto(self):
        ReportCore(self.config).collect_and_send(ReportMode.AUTO)

        self.assertEqual(len(self.server.requests), 1)
        data = self.report_file().read_bytes()
        self.assertIn(EXPECTED_REPORT_ITEM, data.decode())
        self.assertEqual(self.server.requests[0]["data"], data)

    def test_opt_out(self):
        ReportCore(self.config).collect_and_send(ReportMode.OPT_OUT)

        self.assertEqual(len(self.server.requests), 1)
        self.assertEqual(self.report_file().read_text(), OPT_OUT_JSON)
        self.assertEqual(json.loads(self.server.requests[0]["data"]), {"OptOut": True})

    def test_twice_without_force(self):
        ReportCore(self.config).collect_and_send(ReportMode.AUTO)
        path = self.report_file()
        path.write_bytes(b"")

        with self.assertRaises(DuplicateReportError):
            ReportCore(self.config).collect_and_send(ReportMode.AUTO)

        self.assertEqual(len(self.server.requests), 1)
        self.assertEqual(path.read_bytes(), b"")

    def test_twice_with_force(self):
        ReportCore(self.config).collect_and_send(ReportMode.AUTO)
        path = self.report_file()
        path.write_bytes(b"")

        ReportCore(self.config).collect_and_send(ReportMode.AUTO, force=True)

        self.assertEqual(len(self.server.requests), 2)
        self.assertIn(EXPECTED_REPORT_ITEM, path.read_text())

    def test_server_error(self):
        self.server.status = 500

        with self.assertRaises(SendError):
            ReportCore(self.config).collect_and_send(ReportMode.AUTO)

        self.assertIn(EXPECTED_REPORT_ITEM, self.report_file().read_text())


@pytest.mark.integration
class TestInteractiveReport(ReportServerTestCase):
    """INTERACTIVE runs driven over pipes, as a user at a terminal would."""

    def run_interactive(self, answers: list[str | None]):
        """
        Answer each question in turn; None closes the input instead.

        Returns:
            (result, error, saw_report)
        """
        in_read, in_write = os.pipe()
        out_read, out_write = os.pipe()
        stdin = os.fdopen(in_read, "r")
        stdout = os.fdopen(out_write, "w")
        answer_stream = os.fdopen(in_write, "w")
        output_stream = os.fdopen(out_read, "rb")

        outcome: dict = {}

        def run():
            try:
                core = ReportCore(self.config, stdin=stdin, stdout=stdout)
                outcome["result"] = core.collect_and_send(ReportMode.INTERACTIVE)
            except Exception as e:
                outcome["error"] = e
            finally:
                stdout.close()

        worker = threading.Thread(target=run, daemon=True)
        worker.start()

        saw_report = False
        remaining = list(answers)
        for token in iter_tokens(output_stream):
            if EXPECTED_REPORT_ITEM in token:
                saw_report = True
            if QUESTION not in token or answer_stream.closed:
                continue
            answer = remaining.pop(0)
            if answer is None:
                answer_stream.close()
                continue
            answer_stream.write(answer + "\n")
            answer_stream.flush()
            if not remaining:
                answer_stream.close()

        worker.join(timeout=5)
        self.assertFalse(worker.is_alive(), "interactive report timed out")
        if not answer_stream.closed:
            answer_stream.close()
        output_stream.close()
        stdin.close()

        return outcome.get("result"), outcome.get("error"), saw_report

    def assert_no_report(self):
        self.assertEqual(self.server.requests, [])
        self.assertFalse(self.namespace_dir.exists())

    def test_agree(self):
        for answer in ("yes", "y", "YES", "Y"):
            with self.subTest(answer=answer):
                result, error, saw_report = self.run_interactive([answer])

                self.assertIsNone(error)
                self.assertTrue(saw_report)
                self.assertIn(EXPECTED_REPORT_ITEM, self.report_file().read_text())
                self.assertEqual(self.server.requests[-1]["data"], self.report_file().read_bytes())
                CacheStore(self._tmp.name).clear()

    def test_decline(self):
        for answer in ("no", "n", "NO", "N"):
            with self.subTest(answer=answer):
                result, error, saw_report = self.run_interactive([answer])

                self.assertIsNone(error)
                self.assertTrue(saw_report)
                self.assertEqual(self.report_file().read_text(), OPT_OUT_JSON)
                self.assertEqual(self.server.requests[-1]["data"], OPT_OUT_JSON.encode())
                CacheStore(self._tmp.name).clear()

    def test_quit(self):
        for answer in ("quit", "q", "QUIT", "Q", ""):
            with self.subTest(answer=answer):
                result, error, saw_report = self.run_interactive([answer])

                self.assertIsNone(error)
                self.assertTrue(saw_report)
                self.assertTrue(result.aborted)
                self.assert_no_report()

    def test_garbage_then_quit(self):
        answers = ["garbage", "yesgarbage", "nogarbage", "quitgarbage", "Q"]

        result, error, _ = self.run_interactive(answers)

        self.assertIsNone(error)
        self.assertTrue(result.aborted)
        self.assert_no_report()

    def test_closed_input(self):
        result, error, saw_report = self.run_interactive([None])

        self.assertIsNone(error)
        self.assertTrue(saw_report)
        self.assertTrue(result.aborted)
        self.assert_no_report()
