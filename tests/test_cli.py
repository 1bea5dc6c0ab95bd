import contextlib
import io
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from ctxpacker.cli import EXIT_FAILURE, EXIT_NO_PROJECT, EXIT_OK, main


class TestCli(unittest.TestCase):
    def setUp(self):
        self.base = Path(tempfile.mkdtemp(prefix="ctxpacker_cli_"))
        self.proj = self.base / "My Project"
        (self.proj / "src").mkdir(parents=True)
        (self.proj / "obj").mkdir()
        (self.proj / "src" / "A.cs").write_text("class A {}", encoding="utf-8")
        (self.proj / "src" / "B.cs").write_text("class B { Order o; }", encoding="utf-8")
        (self.proj / "obj" / "Gen.cs").write_text("generated", encoding="utf-8")
        self.settings = self.base / "settings.json"
        self.out = self.base / "out"

    def tearDown(self):
        shutil.rmtree(self.base)

    def _run(self, *argv):
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = main(list(argv))
        return code, stdout.getvalue(), stderr.getvalue()

    def test_pack_writes_parts(self):
        code, out, err = self._run(
            "pack", str(self.proj), "--settings", str(self.settings), "--filter", ".NET Build",
            "--out", str(self.out),
        )
        self.assertEqual(code, EXIT_OK, err)
        written = out.split()
        self.assertEqual([os.path.basename(p) for p in written], ["My_Project_part001.txt"])
        content = Path(written[0]).read_text(encoding="utf-8")
        self.assertIn("class A {}", content)
        self.assertIn("class B", content)
        self.assertNotIn("generated", content)

    def test_pack_with_pin_and_small_limit(self):
        code, out, err = self._run(
            "pack", str(self.proj), "--settings", str(self.settings), "--no-headers", "--max-chars", "30",
            "--pin", os.path.join("src", "B.cs"), "--select", "src", "--out", str(self.out), "--stem", "ctx",
        )
        self.assertEqual(code, EXIT_OK, err)
        written = out.split()
        self.assertEqual([os.path.basename(p) for p in written], ["ctx_part001.txt", "ctx_part002.txt"])
        self.assertIn("class B", Path(written[0]).read_text(encoding="utf-8"))
        self.assertIn("class A", Path(written[1]).read_text(encoding="utf-8"))

    def test_file_too_large(self):
        code, out, err = self._run(
            "pack", str(self.proj), "--settings", str(self.settings), "--max-chars", "5", "--out", str(self.out),
        )
        self.assertEqual(code, EXIT_FAILURE)
        self.assertIn("exceeds the maximum character limit", err)
        self.assertFalse(self.out.exists())

    def test_missing_project(self):
        code, _, err = self._run("pack", str(self.base / "missing"), "--settings", str(self.settings))
        self.assertEqual(code, EXIT_NO_PROJECT)
        self.assertIn("does not exist", err)

    def test_unknown_pin(self):
        code, _, err = self._run("pack", str(self.proj), "--settings", str(self.settings), "--pin", "nope.cs")
        self.assertEqual(code, EXIT_FAILURE)
        self.assertIn("nope.cs", err)

    def test_hidden_select_is_rejected(self):
        (self.proj / "notes.txt").write_text("notes", encoding="utf-8")
        code, out, err = self._run(
            "pack", str(self.proj), "--settings", str(self.settings), "--ext", ".cs",
            "--select", "notes.txt", "--out", str(self.out),
        )
        self.assertEqual(code, EXIT_FAILURE)
        self.assertIn("hidden by filters", err)
        self.assertIn("notes.txt", err)
        self.assertEqual(out, "")
        self.assertFalse(self.out.exists())

    def test_hidden_pin_is_rejected(self):
        (self.proj / "notes.txt").write_text("notes", encoding="utf-8")
        code, out, err = self._run(
            "pack", str(self.proj), "--settings", str(self.settings), "--ext", ".cs",
            "--pin", "notes.txt", "--out", str(self.out),
        )
        self.assertEqual(code, EXIT_FAILURE)
        self.assertIn("hidden by filters", err)
        self.assertFalse(self.out.exists())

    def test_malformed_settings_file_still_packs(self):
        self.settings.write_text('{"active_filters": ["Python"], "allowed_extensions": 3}', encoding="utf-8")
        code, out, err = self._run("pack", str(self.proj), "--settings", str(self.settings), "--out", str(self.out))
        self.assertEqual(code, EXIT_OK, err)
        self.assertEqual(len(out.split()), 1)

    def test_unknown_filter(self):
        code, _, err = self._run("pack", str(self.proj), "--settings", str(self.settings), "--filter", "Cobol")
        self.assertEqual(code, EXIT_FAILURE)
        self.assertIn("Cobol", err)

    def test_nothing_to_pack(self):
        code, _, err = self._run(
            "pack", str(self.proj), "--settings", str(self.settings), "--ext", ".py", "--out", str(self.out),
        )
        self.assertEqual(code, EXIT_FAILURE)
        self.assertIn("No files", err)

    def test_structure(self):
        code, out, _ = self._run("structure", str(self.proj), "--settings", str(self.settings), "--ascii",
                                 "--filter", ".NET Build")
        self.assertEqual(code, EXIT_OK)
        self.assertTrue(out.startswith("Project Structure:"))
        self.assertIn("`-- My Project", out)
        self.assertIn("A.cs", out)
        self.assertNotIn("obj", out)
        self.assertNotIn("✓", out)
        self.assertNotIn("\U0001F4CC", out)

    def test_search(self):
        code, out, err = self._run("search", str(self.proj), "order", "--settings", str(self.settings))
        self.assertEqual(code, EXIT_OK)
        self.assertEqual([os.path.basename(p) for p in out.split("\n") if p], ["B.cs"])
        self.assertIn("3 file(s) searched, 1 match(es)", err)

    def test_name_search(self):
        code, out, _ = self._run("search", str(self.proj), "a.cs", "--name", "--settings", str(self.settings))
        self.assertEqual(code, EXIT_OK)
        self.assertEqual([os.path.basename(p) for p in out.split("\n") if p], ["A.cs"])


if __name__ == "__main__":
    unittest.main()
