import shutil
import tempfile
import threading
import unittest
from pathlib import Path

from ctxpacker.core.errors import InvalidPatternError, OperationCanceledError, PathNotFoundError
from ctxpacker.core.file_reader import FileReader
from ctxpacker.core.file_scanner import build_tree
from ctxpacker.core.models import SearchOptions
from ctxpacker.core.search import clear_search_highlight, compile_matcher, search_by_name, search_content


class _FlakyReader(FileReader):
    def __init__(self, broken):
        self.broken = broken

    def read_file_content(self, path):
        if path.endswith(self.broken):
            raise PathNotFoundError(f"File not found: {path}", path)
        return super().read_file_content(path)


class TestSearch(unittest.TestCase):
    def setUp(self):
        self.base = Path(tempfile.mkdtemp(prefix="ctxpacker_search_"))
        (self.base / "src").mkdir()
        (self.base / "src" / "Service.cs").write_text("public class OrderService { }", encoding="utf-8")
        (self.base / "src" / "Orders.cs").write_text("var orders = new List<Order>();", encoding="utf-8")
        (self.base / "notes.txt").write_text("nothing here", encoding="utf-8")
        self.root = build_tree(str(self.base))

    def tearDown(self):
        shutil.rmtree(self.base)

    def _names(self, nodes):
        return sorted(n.name for n in nodes)

    def test_plain_search_is_case_insensitive_by_default(self):
        result = search_content(self.root, SearchOptions("ORDER"))
        self.assertEqual(result.files_searched, 3)
        self.assertEqual(result.files_matched, 2)
        self.assertEqual(self._names(result.matched_nodes), ["Orders.cs", "Service.cs"])
        self.assertTrue(all(n.is_search_match for n in result.matched_nodes))

    def test_case_sensitive(self):
        result = search_content(self.root, SearchOptions("Order", case_sensitive=True))
        self.assertEqual(self._names(result.matched_nodes), ["Orders.cs", "Service.cs"])
        result = search_content(self.root, SearchOptions("ORDER", case_sensitive=True))
        self.assertEqual(result.files_matched, 0)

    def test_whole_word(self):
        result = search_content(self.root, SearchOptions("order", whole_word=True))
        self.assertEqual(self._names(result.matched_nodes), ["Orders.cs"])

    def test_whole_word_escapes_term(self):
        match = compile_matcher(SearchOptions("a.b", whole_word=True))
        self.assertTrue(match("x a.b y"))
        self.assertFalse(match("x acb y"))

    def test_regex(self):
        result = search_content(self.root, SearchOptions(r"class\s+\w+Service", use_regex=True))
        self.assertEqual(self._names(result.matched_nodes), ["Service.cs"])

    def test_invalid_regex_matches_nothing(self):
        with self.assertRaises(InvalidPatternError):
            compile_matcher(SearchOptions("([", use_regex=True))
        result = search_content(self.root, SearchOptions("([", use_regex=True))
        self.assertEqual(result.files_searched, 3)
        self.assertEqual(result.files_matched, 0)

    def test_hidden_files_are_skipped(self):
        for node in self.root.iter_nodes():
            if node.name == "Orders.cs":
                node.is_visible = False
        result = search_content(self.root, SearchOptions("order"))
        self.assertEqual(result.files_searched, 2)
        self.assertEqual(self._names(result.matched_nodes), ["Service.cs"])

    def test_unreadable_file_is_counted_but_skipped(self):
        result = search_content(self.root, SearchOptions("order"), reader=_FlakyReader("Orders.cs"))
        self.assertEqual(result.files_searched, 3)
        self.assertEqual(self._names(result.matched_nodes), ["Service.cs"])

    def test_cancel_raises(self):
        event = threading.Event()
        event.set()
        with self.assertRaises(OperationCanceledError):
            search_content(self.root, SearchOptions("order"), cancel_event=event)

    def test_name_search_and_clear(self):
        matched = search_by_name(self.root, SearchOptions("order"))
        self.assertEqual(self._names(matched), ["Orders.cs"])
        clear_search_highlight(self.root)
        self.assertFalse(any(n.is_search_match for n in self.root.iter_nodes()))

    def test_missing_root_rejected(self):
        with self.assertRaises(ValueError):
            search_content(None, SearchOptions("x"))


if __name__ == "__main__":
    unittest.main()
