"""
Unit tests: date input migration script
"""
import json
from datetime import date

import pytest

from scripts.migrate_date_inputs import IMPORT_LINE, main, rewrite_source

PAGE = '''import streamlit as st

from fleetdash.web.framework.state import flash


def render(doc):
    expiry = st.text_input("Expiry Date", value=doc.expiry_date, key="exp")
    issued = c1.text_input('Issue Date', value="")
    name = st.text_input("Document Name", value=doc.document_name)
'''


class TestRewriteSource:
    """Text date fields become date pickers"""

    def test_rewrites_date_labels_only(self):
        text, changed = rewrite_source(PAGE)

        assert changed
        assert 'expiry = format_date(st.date_input("Expiry Date", value=parse_date(doc.expiry_date), key="exp"))' in text
        assert "issued = format_date(c1.date_input('Issue Date', value=None))" in text
        assert 'st.text_input("Document Name", value=doc.document_name)' in text

    def test_rewritten_value_stays_a_json_string(self):
        text, _ = rewrite_source(
            'import streamlit as st\nexpiry = st.text_input("Expiry Date", value=doc.expiry_date)\n'
        )
        st = MagicStreamlit(date(2025, 1, 31))
        namespace = {"st": st, "doc": type("Doc", (), {"expiry_date": "2025-01-31"})()}
        exec(compile(text.replace("import streamlit as st\n", ""), "<page>", "exec"), namespace)

        assert namespace["expiry"] == "2025-01-31"
        assert json.loads(json.dumps({"expiry_date": namespace["expiry"]})) == {"expiry_date": "2025-01-31"}
        assert st.seen_value == date(2025, 1, 31)

    def test_value_with_commas_is_kept_whole(self):
        source = 'import streamlit as st\nd = st.text_input("Due Date", value=fmt(a, b), key="k")\n'
        text, _ = rewrite_source(source)
        assert 'd = format_date(st.date_input("Due Date", value=parse_date(fmt(a, b)), key="k"))' in text

    def test_multiline_call(self):
        source = (
            "import streamlit as st\n"
            "d = st.text_input(\n"
            '    "Service Date",\n'
            "    value=vehicle.get('next_service_date', ''),\n"
            ")\n"
        )
        text, _ = rewrite_source(source)
        assert "format_date(st.date_input(\"Service Date\", value=parse_date(vehicle.get('next_service_date', ''))))" in text

    def test_adds_import_after_existing_imports(self):
        text, _ = rewrite_source(PAGE)
        lines = text.splitlines()
        assert lines.count(IMPORT_LINE) == 1
        assert lines.index(IMPORT_LINE) == lines.index("from fleetdash.web.framework.state import flash") + 1

    def test_existing_import_is_kept(self):
        source = "from fleetdash.infra.clock import format_date, parse_date\n" + PAGE
        text, _ = rewrite_source(source)
        assert text.count("fleetdash.infra.clock") == 1

    def test_multiline_import_is_recognised(self):
        source = (
            "from fleetdash.infra.clock import (\n"
            "    days_until,\n"
            "    format_date,\n"
            "    parse_date,\n"
            ")\n" + PAGE
        )
        text, _ = rewrite_source(source)
        assert text.count("fleetdash.infra.clock") == 1

    def test_only_missing_names_are_imported(self):
        source = "from fleetdash.infra.clock import parse_date\n" + PAGE
        text, _ = rewrite_source(source)
        assert "from fleetdash.infra.clock import format_date\n" in text
        assert IMPORT_LINE not in text

    def test_idempotent(self):
        once, _ = rewrite_source(PAGE)
        twice, changed = rewrite_source(once)
        assert not changed
        assert twice == once

    def test_untouched_source(self):
        source = 'import streamlit as st\nst.text_input("Name", value="x")\n'
        assert rewrite_source(source) == (source, False)


class MagicStreamlit:
    """Stand-in for ``st`` whose date picker returns a fixed date."""

    def __init__(self, picked):
        self.picked = picked
        self.seen_value = None

    def date_input(self, label, value=None, **kwargs):
        self.seen_value = value
        return self.picked


class TestMain:
    def test_updates_and_skips(self, tmp_path, capsys):
        page = tmp_path / "page.py"
        page.write_text(PAGE, encoding="utf-8")
        plain = tmp_path / "plain.py"
        plain.write_text("x = 1\n", encoding="utf-8")

        assert main([str(page), str(plain), str(tmp_path / "gone.py")]) == 0

        out = capsys.readouterr().out
        assert "✅ Updated" in out
        assert "no changes needed" in out
        assert "file not found" in out
        assert "st.date_input" in page.read_text(encoding="utf-8")

    def test_dry_run_writes_nothing(self, tmp_path):
        page = tmp_path / "page.py"
        page.write_text(PAGE, encoding="utf-8")
        main([str(page), "--dry-run"])
        assert page.read_text(encoding="utf-8") == PAGE

    def test_unparsable_file_fails(self, tmp_path, capsys):
        broken = tmp_path / "broken.py"
        broken.write_text("def oops(:\n", encoding="utf-8")
        assert main([str(broken)]) == 1
        assert "❌ Failed" in capsys.readouterr().out


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
