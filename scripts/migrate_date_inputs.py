#!/usr/bin/env python3
"""
Date input migration script

Rewrites free-text date fields in page modules into date pickers:

    st.text_input("Expiry Date", value=doc.expiry_date, ...)
    ->  format_date(st.date_input("Expiry Date", value=parse_date(doc.expiry_date), ...))

``format_date`` turns the picked ``date`` back into the ``YYYY-MM-DD`` string
the surrounding code already handles (``""`` when the picker is cleared).
Only calls whose literal label contains the word "Date" and that pass a
``value=`` are touched. Missing ``fleetdash.infra.clock`` imports are added.

Usage:
    python scripts/migrate_date_inputs.py [FILE ...] [--dry-run]

Without FILE arguments every module under fleetdash/web/pages_impl/ is scanned.
"""

import argparse
import ast
import re
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

PROJECT_ROOT = Path(__file__).parent.parent
PAGES_IMPL_DIR = PROJECT_ROOT / "fleetdash" / "web" / "pages_impl"

CLOCK_MODULE = "fleetdash.infra.clock"
IMPORT_LINE = f"from {CLOCK_MODULE} import format_date, parse_date"

_DATE_LABEL = re.compile(r"\bDate\b")
_EMPTY_VALUES = ("", None)


class _Source:
    """Maps ast (line, byte column) positions to string offsets."""

    def __init__(self, text: str):
        self.text = text
        self.lines = text.splitlines(keepends=True)
        self.starts = [0]
        for line in self.lines:
            self.starts.append(self.starts[-1] + len(line))

    def offset(self, lineno: int, col: int) -> int:
        line = self.lines[lineno - 1] if lineno <= len(self.lines) else ""
        return self.starts[lineno - 1] + len(line.encode("utf-8")[:col].decode("utf-8"))

    def span(self, node: ast.AST) -> Tuple[int, int]:
        return (
            self.offset(node.lineno, node.col_offset),
            self.offset(node.end_lineno, node.end_col_offset),
        )

    def segment(self, node: ast.AST) -> str:
        start, end = self.span(node)
        return self.text[start:end]


def _date_label(call: ast.Call) -> Optional[ast.Constant]:
    if not call.args:
        return None
    label = call.args[0]
    if isinstance(label, ast.Constant) and isinstance(label.value, str) and _DATE_LABEL.search(label.value):
        return label
    return None


def _is_text_date_input(node: ast.AST) -> bool:
    return (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Attribute)
        and node.func.attr == "text_input"
        and _date_label(node) is not None
        and any(kw.arg == "value" for kw in node.keywords)
    )


def _rewrite_call(src: _Source, call: ast.Call) -> Tuple[str, bool]:
    """Replacement text for one call and whether it needs ``parse_date``."""
    target = src.segment(call.func.value)
    args = [src.segment(arg) for arg in call.args]
    uses_parse = False
    for kw in call.keywords:
        if kw.arg is None:
            args.append(f"**{src.segment(kw.value)}")
        elif kw.arg == "value":
            if isinstance(kw.value, ast.Constant) and kw.value.value in _EMPTY_VALUES:
                args.append("value=None")
            else:
                args.append(f"value=parse_date({src.segment(kw.value)})")
                uses_parse = True
        else:
            args.append(f"{kw.arg}={src.segment(kw.value)}")
    return f"format_date({target}.date_input({', '.join(args)}))", uses_parse


def _imported_names(tree: ast.Module) -> set:
    names = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom):
            names.update(alias.asname or alias.name for alias in node.names)
    return names


def _add_imports(text: str, names: Sequence[str]) -> str:
    """Insert ``from fleetdash.infra.clock import ...`` after the last top-level import."""
    line = f"from {CLOCK_MODULE} import {', '.join(sorted(names))}"
    tree = ast.parse(text)
    imports = [n for n in tree.body if isinstance(n, (ast.Import, ast.ImportFrom))]
    if not imports:
        return f"{line}\n{text}"
    src = _Source(text)
    end = src.offset(imports[-1].end_lineno + 1, 0)
    if not text[:end].endswith("\n"):
        return text[:end].rstrip("\n") + "\n" + line + "\n" + text[end:]
    return text[:end] + line + "\n" + text[end:]


def rewrite_source(text: str) -> Tuple[str, bool]:
    """
    Rewrite one module's source.

    Raises:
        SyntaxError: the module does not parse

    Returns:
        (new source, whether anything changed)
    """
    tree = ast.parse(text)
    src = _Source(text)
    calls = sorted(
        (node for node in ast.walk(tree) if _is_text_date_input(node)),
        key=lambda node: src.span(node)[0],
    )
    if not calls:
        return text, False

    pieces: List[str] = []
    cursor = 0
    needed = {"format_date"}
    for call in calls:
        start, end = src.span(call)
        if start < cursor:
            # nested inside a call that was already rewritten
            continue
        replacement, uses_parse = _rewrite_call(src, call)
        if uses_parse:
            needed.add("parse_date")
        pieces.append(text[cursor:start])
        pieces.append(replacement)
        cursor = end
    pieces.append(text[cursor:])
    new_text = "".join(pieces)

    missing = needed - _imported_names(ast.parse(new_text))
    if missing:
        new_text = _add_imports(new_text, missing)
    return new_text, True


def migrate_file(path: Path, dry_run: bool = False) -> bool:
    text = path.read_text(encoding="utf-8")
    new_text, changed = rewrite_source(text)
    if changed and not dry_run:
        path.write_text(new_text, encoding="utf-8")
    return changed


def default_targets() -> List[Path]:
    return sorted(p for p in PAGES_IMPL_DIR.glob("*.py") if p.name != "__init__.py")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Turn date text inputs into st.date_input")
    parser.add_argument("files", nargs="*", type=Path, help="modules to rewrite (default: all page modules)")
    parser.add_argument("--dry-run", action="store_true", help="report only, write nothing")
    args = parser.parse_args(argv)

    targets = args.files or default_targets()
    updated = 0
    failed = 0
    for path in targets:
        try:
            rel = path.relative_to(PROJECT_ROOT)
        except ValueError:
            rel = path
        if not path.exists():
            print(f"⏭️  Skipped {rel} - file not found")
            continue
        try:
            changed = migrate_file(path, args.dry_run)
        except SyntaxError as e:
            failed += 1
            print(f"❌ Failed {rel} - {e.msg} (line {e.lineno})")
            continue
        if changed:
            updated += 1
            print(f"✅ Updated {rel}")
        else:
            print(f"⏭️  Skipped {rel} - no changes needed")

    print(f"\n✨ Date input migration complete: {updated} of {len(targets)} file(s) updated")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
