import os
import shutil
import tempfile
import threading
import unittest
from pathlib import Path

from ctxpacker.core.errors import CtxPackerError, ProjectLoadError
from ctxpacker.core.models import AppSettings
from ctxpacker.core.progress import ProgressChannel, ProgressReporter
from ctxpacker.core.project import ProjectSession
from ctxpacker.core.worker import OperationWorker


class TestProjectSession(unittest.TestCase):
    def setUp(self):
        self.base = Path(tempfile.mkdtemp(prefix="ctxpacker_project_"))
        (self.base / "src").mkdir()
        (self.base / "bin").mkdir()
        (self.base / "src" / "App.cs").write_text("class App {}", encoding="utf-8")
        (self.base / "src" / "Util.cs").write_text("class Util {}", encoding="utf-8")
        (self.base / "src" / "debug.log").write_text("trace", encoding="utf-8")
        (self.base / "bin" / "Out.cs").write_text("generated", encoding="utf-8")
        (self.base / ".gitignore").write_text("*.log\n", encoding="utf-8")
        self.settings = AppSettings(allowed_extensions=[".cs", ".log"], active_filters={".NET Build": True})
        self.session = ProjectSession()

    def tearDown(self):
        shutil.rmtree(self.base)

    def _load_and_filter(self):
        self.session.load(str(self.base))
        engine = self.session.build_engine(self.settings)
        self.assertTrue(self.session.apply_filters(engine))
        return engine

    def test_load_reports_progress_then_clears(self):
        calls = []
        self.session.load(str(self.base), ProgressReporter(lambda s, p: calls.append((s, p))))
        self.assertEqual([p for _, p in calls[:-1]], [10, 30, 60, 90, 100])
        self.assertEqual(calls[-1], ("", None))
        self.assertTrue(self.session.is_loaded)
        self.assertTrue(self.session.has_local_gitignore)
        self.assertEqual(self.session.gitignore_patterns, ["*.log"])

    def test_missing_folder(self):
        with self.assertRaises(ProjectLoadError):
            self.session.load(str(self.base / "missing"))
        with self.assertRaises(ValueError):
            self.session.load("  ")

    def test_filters_and_selection(self):
        self._load_and_filter()
        self.session.select_all()
        selected = [os.path.basename(p) for p in self.session.selected_file_paths()]
        self.assertEqual(selected, ["App.cs", "Util.cs"])

    def test_gitignore_can_be_disabled(self):
        self.session.load(str(self.base))
        engine = self.session.build_engine(self.settings, use_gitignore=False)
        self.session.apply_filters(engine)
        self.session.select_all()
        selected = [os.path.basename(p) for p in self.session.selected_file_paths()]
        self.assertIn("debug.log", selected)

    def test_find_accepts_relative_paths(self):
        self._load_and_filter()
        node = self.session.find(os.path.join("src", "App.cs"))
        self.assertIsNotNone(node)
        self.assertEqual(node.name, "App.cs")
        self.assertIsNone(self.session.find("nope.cs"))

    def test_generate_parts_pinned_first(self):
        self._load_and_filter()
        util = self.session.find(os.path.join("src", "Util.cs"))
        self.session.select_all()
        self.assertTrue(self.session.pin(util))
        parts = self.session.generate_parts(self.settings, global_prompt="Context:")
        self.assertEqual(len(parts), 2)
        self.assertTrue(parts[0].content.startswith("Context:\n\n// File: "))
        self.assertIn("class Util {}", parts[0].content)
        self.assertIn("class App {}", parts[1].content)

    def test_close_drops_everything(self):
        self._load_and_filter()
        self.session.close()
        self.assertFalse(self.session.is_loaded)
        with self.assertRaises(CtxPackerError):
            self.session.select_all()

    def test_filter_pass_on_worker(self):
        self.session.load(str(self.base))
        engine = self.session.build_engine(self.settings)
        channel = ProgressChannel()
        with OperationWorker() as worker:
            future = worker.submit("filter", self.session.apply_filters, engine, channel)
            self.assertTrue(future.result(timeout=10))
        messages = list(channel.drain())
        self.assertEqual(messages[-1], ("", None))
        self.assertIn(("Filtering complete", 100.0), messages)


class TestOperationWorker(unittest.TestCase):
    def test_new_submission_cancels_previous_of_same_kind(self):
        started = threading.Event()
        release = threading.Event()
        seen = {}

        def slow(tag, cancel_event=None):
            started.set()
            release.wait(5)
            seen[tag] = cancel_event.is_set()
            return tag

        with OperationWorker() as worker:
            first = worker.submit("search", slow, "first")
            self.assertTrue(started.wait(5))
            second = worker.submit("search", slow, "second")
            other = worker.submit("filter", slow, "other")
            release.set()
            self.assertEqual(first.result(timeout=5), "first")
            self.assertEqual(second.result(timeout=5), "second")
            self.assertEqual(other.result(timeout=5), "other")

        self.assertTrue(seen["first"])
        self.assertFalse(seen["second"])
        self.assertFalse(seen["other"])

    def test_cancel_by_kind(self):
        gate = threading.Event()
        events = []

        def record(cancel_event=None):
            events.append(cancel_event)
            gate.wait(5)

        with OperationWorker() as worker:
            future = worker.submit("filter", record)
            worker.cancel("filter")
            gate.set()
            future.result(timeout=5)
        self.assertTrue(events[0].is_set())


if __name__ == "__main__":
    unittest.main()
