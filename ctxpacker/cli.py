from __future__ import annotations

import os
import re
import sys
import argparse
from typing import List, Optional

from ctxpacker.core.errors import CtxPackerError, FileTooLargeError, ProjectLoadError
from ctxpacker.core.filter_catalog import load_filter_file, predefined_filters
from ctxpacker.core.filter_engine import FilterEngine
from ctxpacker.core.models import AppSettings, SearchOptions
from ctxpacker.core.part_packer import write_parts
from ctxpacker.core.progress import ProgressReporter
from ctxpacker.core.project import ProjectSession
from ctxpacker.core.search import search_by_name, search_content
from ctxpacker.core.tree_exporter import build_structure
from ctxpacker.utils.logger import enable_console_logging, logger
from ctxpacker.utils.prefs import load_settings

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_NO_PROJECT = 2


def _default_stem(base_folder: str) -> str:
    base = os.path.basename((base_folder or "").rstrip("\\/")) or "context"
    name = re.sub(r"\s+", "_", base)
    name = re.sub(r"[^\w.\-]+", "_", name)
    return name.strip("._-") or "context"


def _progress(status: str, percent: Optional[float]) -> None:
    if not status:
        return
    if percent is None:
        print(status, file=sys.stderr)
    else:
        print(f"{status} ({percent:.0f}%)", file=sys.stderr)


def _split_extensions(values: List[str]) -> List[str]:
    exts: List[str] = []
    for v in values:
        for e in v.split(","):
            e = e.strip().lower()
            if e:
                exts.append(e if e.startswith(".") else "." + e)
    return exts


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("root", help="Project folder")
    p.add_argument("--settings", help="Settings JSON file (default: per-user config)")
    p.add_argument("--ext", action="append", default=[], help="Allowed extensions, e.g. .cs,.ts (repeatable)")
    p.add_argument("--ignore", action="append", default=[], help="Filter file with ignore patterns (repeatable)")
    p.add_argument("--filter", action="append", default=[], dest="filters",
                   help=f"Activate a predefined filter: {', '.join(predefined_filters())} (repeatable)")
    p.add_argument("--default-filters", action="store_true", help="Activate every predefined filter")
    p.add_argument("--no-gitignore", action="store_true", help="Do not honor the project's .gitignore")
    p.add_argument("--strict-gitignore", action="store_true",
                   help="Evaluate .gitignore with full git semantics (negation, dir-only patterns)")
    p.add_argument("--verbose", "-v", action="store_true", help="Log to stderr")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ctxpacker", description="Pack project files into size-bounded prompt parts")
    sub = p.add_subparsers(dest="command", required=True)

    pack = sub.add_parser("pack", help="Generate part files")
    _add_filter_args(pack)
    pack.add_argument("--max-chars", type=int, help="Character budget per part")
    pack.add_argument("--no-headers", action="store_true", help="Do not prefix files with a path header")
    pack.add_argument("--pin", action="append", default=[], help="File to pin first (repeatable)")
    pack.add_argument("--select", action="append", default=[], help="File to include (repeatable)")
    pack.add_argument("--prompt", help="Text placed at the start of part 1 (or the name of a saved prompt)")
    pack.add_argument("--out", "-o", default=".", help="Output folder for part files")
    pack.add_argument("--stem", help="Part file name prefix (default: project folder name)")

    tree = sub.add_parser("structure", help="Print the project outline")
    _add_filter_args(tree)
    tree.add_argument("--ascii", action="store_true", help="ASCII connectors instead of box drawing")
    tree.add_argument("--markdown", action="store_true", help="Wrap in ```text fences")
    tree.add_argument("--all-files", action="store_true", help="Ignore the extension whitelist")

    search = sub.add_parser("search", help="Find files by name or content")
    _add_filter_args(search)
    search.add_argument("term", help="Search term")
    search.add_argument("--name", action="store_true", help="Match file and folder names instead of content")
    search.add_argument("--case-sensitive", action="store_true")
    search.add_argument("--whole-word", action="store_true")
    search.add_argument("--regex", action="store_true")
    return p


def _prepare(args) -> tuple:
    """Load settings and project, apply filters. Returns (settings, session, engine)."""
    settings = load_settings(args.settings) if args.settings else load_settings()
    if args.strict_gitignore:
        settings.gitignore_mode = "git"

    session = ProjectSession()
    session.load(os.path.abspath(args.root))

    extra = []
    for path in args.ignore:
        extra.extend(load_filter_file(path))
    names = list(args.filters)
    if args.default_filters:
        names.extend(predefined_filters())

    exts = _split_extensions(args.ext) or None
    engine = session.build_engine(
        settings,
        use_gitignore=not args.no_gitignore,
        extra_filter_names=names,
        extra_filters=extra,
        allowed_extensions=exts,
    )
    session.apply_filters(engine, ProgressReporter(_progress) if args.verbose else None)
    return settings, session, engine


def _cmd_pack(args, settings: AppSettings, session: ProjectSession) -> int:
    if args.max_chars is not None:
        if args.max_chars <= 0:
            print("--max-chars must be positive", file=sys.stderr)
            return EXIT_FAILURE
        settings.max_chars_limit = args.max_chars
    if args.no_headers:
        settings.include_file_headers = False

    for path in args.pin:
        node = session.find(path)
        if node is None or node.is_directory:
            print(f"Cannot pin (not a file in the project): {path}", file=sys.stderr)
            return EXIT_FAILURE
        if not node.is_visible:
            print(f"Cannot pin (hidden by filters): {path}", file=sys.stderr)
            return EXIT_FAILURE
        session.pin(node)

    if args.select:
        for path in args.select:
            node = session.find(path)
            if node is None:
                print(f"Cannot select (not in the project): {path}", file=sys.stderr)
                return EXIT_FAILURE
            if not node.is_visible:
                print(f"Cannot select (hidden by filters): {path}", file=sys.stderr)
                return EXIT_FAILURE
            session.set_selected(node, True)
    elif not args.pin:
        session.select_all()

    prompt = args.prompt
    saved = settings.find_prompt(prompt)
    if saved is not None:
        prompt = saved.content

    try:
        parts = session.generate_parts(settings, global_prompt=prompt)
    except FileTooLargeError as e:
        print(str(e), file=sys.stderr)
        return EXIT_FAILURE

    if not parts:
        print("No files found to pack.", file=sys.stderr)
        return EXIT_FAILURE

    stem = args.stem or _default_stem(session.root_path)
    for out_path in write_parts(parts, args.out, stem):
        print(out_path)
    print(f"Generated {len(parts)} part(s) from {len(session.pins)} pinned and "
          f"{len(session.selected_file_paths())} selected file(s).", file=sys.stderr)
    return EXIT_OK


def _cmd_structure(args, settings: AppSettings, session: ProjectSession, engine: FilterEngine) -> int:
    text = build_structure(
        session.root_node,
        style="ascii" if args.ascii else "unicode",
        markdown=args.markdown,
        engine=engine if args.all_files else None,
    )
    sys.stdout.write(text)
    return EXIT_OK


def _cmd_search(args, settings: AppSettings, session: ProjectSession) -> int:
    options = SearchOptions(
        search_term=args.term,
        case_sensitive=args.case_sensitive,
        use_regex=args.regex,
        whole_word=args.whole_word,
    )
    if args.name:
        nodes = search_by_name(session.root_node, options)
        for node in nodes:
            print(node.full_path)
        print(f"{len(nodes)} match(es)", file=sys.stderr)
        return EXIT_OK

    result = search_content(session.root_node, options, session.reader)
    for node in result.matched_nodes:
        print(node.full_path)
    print(f"{result.files_searched} file(s) searched, {result.files_matched} match(es)", file=sys.stderr)
    return EXIT_OK


def main(argv: List[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.verbose:
        enable_console_logging()

    root = os.path.abspath(args.root)
    if not os.path.isdir(root):
        print(f"Project folder does not exist: {root}", file=sys.stderr)
        return EXIT_NO_PROJECT

    try:
        settings, session, engine = _prepare(args)
        if args.command == "pack":
            return _cmd_pack(args, settings, session)
        if args.command == "structure":
            return _cmd_structure(args, settings, session, engine)
        return _cmd_search(args, settings, session)
    except ProjectLoadError as e:
        print(str(e), file=sys.stderr)
        return EXIT_NO_PROJECT
    except KeyError as e:
        print(str(e.args[0]) if e.args else str(e), file=sys.stderr)
        return EXIT_FAILURE
    except (CtxPackerError, OSError, ValueError) as e:
        logger.error(f"Command '{args.command}' failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
