"""Unit tests for usage scanning."""

import pytest

from env_doctor.core.scanner import (
    get_unique_variable_names,
    is_client_side_file,
    scan_file,
    scan_source,
    scan_usages,
)
from env_doctor.models.env import DYNAMIC_NAME, AccessIdiom, InferredType
from env_doctor.utils.errors import ScanError


def _by_name(usages):
    return {u.name: u for u in usages}


class TestJavaScriptScanning:
    """Tests for JavaScript and TypeScript reads."""

    def test_direct_access(self):
        """Test dotted access and its column."""
        usages = scan_usages("src/db.js", "const url = process.env.DATABASE_URL;")

        assert len(usages) == 1
        usage = usages[0]
        assert usage.name == "DATABASE_URL"
        assert usage.access_idiom == AccessIdiom.DIRECT
        assert usage.location.file == "src/db.js"
        assert usage.location.line == 1
        assert usage.location.column == 24
        assert usage.snippet == "const url = process.env.DATABASE_URL;"

    def test_bracket_access_column_skips_quote(self):
        """Test that bracket reads point at the name, not the quote."""
        usages = scan_usages("src/a.js", "const a = process.env['API_KEY'];")

        assert len(usages) == 1
        assert usages[0].name == "API_KEY"
        assert usages[0].access_idiom == AccessIdiom.BRACKET
        assert usages[0].location.column == 23

    def test_template_literal_key(self):
        """Test that a template without substitutions is a literal key."""
        usages = scan_usages("src/a.js", "const a = process.env[`API_KEY`];")
        assert usages[0].name == "API_KEY"
        assert usages[0].access_idiom == AccessIdiom.BRACKET

    def test_dynamic_access(self):
        """Test computed keys."""
        source = "\n".join(
            [
                "const a = process.env[key];",
                "const b = process.env[`API_${suffix}`];",
            ]
        )
        usages = scan_usages("src/a.js", source)

        assert len(usages) == 2
        for usage in usages:
            assert usage.name == DYNAMIC_NAME
            assert usage.access_idiom == AccessIdiom.DYNAMIC
            assert usage.is_dynamic
        assert usages[0].location.column == 22

    def test_empty_literal_key_skipped(self):
        """Test that process.env[''] is not a usage."""
        assert scan_usages("src/a.js", "const a = process.env[''];") == []

    def test_destructuring(self):
        """Test object pattern reads."""
        source = "const { A, B: alias, C = 'x', ...rest } = process.env;"
        usages = scan_usages("src/a.js", source)

        assert [u.name for u in usages] == ["A", "B", "C"]
        assert all(u.access_idiom == AccessIdiom.DESTRUCTURE for u in usages)
        assert usages[0].location.column == 8

    def test_destructuring_assignment(self):
        """Test destructuring in a plain assignment."""
        usages = scan_usages("src/a.js", "let A;\n({ A } = process.env);")
        assert [u.name for u in usages] == ["A"]
        assert usages[0].location.line == 2

    def test_destructuring_other_object_ignored(self):
        """Test that patterns over other objects are not reads."""
        assert scan_usages("src/a.js", "const { A } = config.env;") == []

    def test_parenthesized_access(self):
        """Test reads through parentheses."""
        usages = scan_usages("src/a.js", "const a = (process.env).WRAPPED;")
        assert [u.name for u in usages] == ["WRAPPED"]

    def test_unrelated_env_objects_ignored(self):
        """Test that other .env objects are not reads."""
        assert scan_usages("src/a.js", "const a = config.env.NOT_ME;") == []

    def test_multiple_lines_sorted(self):
        """Test that usages come back in line and column order."""
        source = "const b = process.env.B;\nconst a = process.env.A; const c = process.env.C;"
        usages = scan_usages("src/a.js", source)
        assert [(u.name, u.location.line) for u in usages] == [("B", 1), ("A", 2), ("C", 2)]

    def test_unicode_column_counts_characters(self):
        """Test that columns count characters rather than bytes."""
        usages = scan_usages("src/a.js", 'const s = "héllo"; const v = process.env.X;')
        assert usages[0].location.column == 41


class TestTypeInference:
    """Tests for single-hop type inference."""

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("const p = parseInt(process.env.V, 10);", InferredType.NUMBER),
            ("const p = parseFloat(process.env.V);", InferredType.NUMBER),
            ("const p = Number(process.env.V);", InferredType.NUMBER),
            ("const d = process.env.V === 'true';", InferredType.BOOLEAN),
            ("const d = 'false' !== process.env.V;", InferredType.BOOLEAN),
            ("const c = JSON.parse(process.env.V);", InferredType.JSON),
            ("const h = process.env.V.split(',');", InferredType.ARRAY),
            ("const v = process.env.V;", InferredType.UNKNOWN),
            ("const d = process.env.V === 'yes';", InferredType.UNKNOWN),
        ],
    )
    def test_inference(self, source, expected):
        """Test inference from the immediate parent expression."""
        usages = scan_usages("src/a.js", source)
        assert usages[0].inferred_type == expected

    def test_bracket_inference(self):
        """Test inference on bracket reads."""
        usages = scan_usages("src/a.js", "const p = parseInt(process.env['PORT']);")
        assert usages[0].inferred_type == InferredType.NUMBER

    def test_typescript_non_null(self):
        """Test that TypeScript non-null assertions are transparent."""
        usages = scan_usages("src/a.ts", "const port: number = Number(process.env.PORT!);")
        assert usages[0].name == "PORT"
        assert usages[0].inferred_type == InferredType.NUMBER

    def test_inference_is_single_hop(self):
        """Test that inference does not follow variables."""
        source = "const raw = process.env.PORT;\nconst port = parseInt(raw);"
        usages = scan_usages("src/a.js", source)
        assert usages[0].inferred_type == InferredType.UNKNOWN


class TestClientClassification:
    """Tests for client-side classification."""

    def test_client_component_under_nextjs(self):
        """Test that reads in client files are client-side."""
        source = "export const Button = () => <a href={process.env.SITE_URL}>x</a>;"
        usages = scan_usages("src/components/Button.tsx", source, "nextjs")
        assert usages[0].name == "SITE_URL"
        assert usages[0].is_client_side is True

    def test_server_file_uses_prefix(self):
        """Test prefix-based classification outside client files."""
        source = "const a = process.env.NEXT_PUBLIC_URL;\nconst b = process.env.DB_URL;"
        usages = _by_name(scan_usages("src/lib/config.ts", source, "nextjs"))
        assert usages["NEXT_PUBLIC_URL"].is_client_side is True
        assert usages["DB_URL"].is_client_side is False

    def test_import_meta_under_vite(self):
        """Test that import.meta.env reads are client-side under vite."""
        usages = scan_usages("src/main.ts", "const u = import.meta.env.VITE_API_URL;", "vite")
        assert usages[0].name == "VITE_API_URL"
        assert usages[0].is_client_side is True

    def test_server_only_framework(self):
        """Test that server-only frameworks never report client reads."""
        usages = scan_usages("src/components/A.ts", "const u = import.meta.env.X;", "node")
        assert usages[0].is_client_side is False

    def test_is_client_side_file(self):
        """Test client file conventions."""
        assert is_client_side_file("src/components/Nav.tsx")
        assert is_client_side_file("pages/index.js")
        assert is_client_side_file("app/dashboard/page.tsx")
        assert is_client_side_file("src/widget.client.ts")
        assert not is_client_side_file("src/lib/db.ts")
        assert not is_client_side_file("app/api/route.ts")


class TestPythonScanning:
    """Tests for Python reads."""

    SETTINGS = "\n".join(
        [
            "import os",
            "from os import environ as env, getenv",
            "import json",
            "",
            'DATABASE_URL = os.environ["DATABASE_URL"]',
            'PORT = int(os.getenv("PORT", "8000"))',
            'DEBUG = os.environ.get("DEBUG") == "true"',
            'HOSTS = os.getenv("HOSTS", "").split(",")',
            'CONFIG = json.loads(env["APP_CONFIG"])',
            'LEVEL = getenv("LOG_LEVEL")',
            'os.environ["SET_ME"] = "1"',
            'name = "X"',
            "value = os.environ[name]",
        ]
    )

    def test_settings_module(self):
        """Test the supported Python idioms."""
        usages = scan_usages("app/settings.py", self.SETTINGS, "python")
        by_name = _by_name(usages)

        assert "SET_ME" not in by_name
        assert by_name["DATABASE_URL"].access_idiom == AccessIdiom.BRACKET
        assert by_name["DATABASE_URL"].location.line == 5
        assert by_name["DATABASE_URL"].location.column == 27
        assert by_name["PORT"].access_idiom == AccessIdiom.DIRECT
        assert by_name["PORT"].inferred_type == InferredType.NUMBER
        assert by_name["DEBUG"].inferred_type == InferredType.BOOLEAN
        assert by_name["HOSTS"].inferred_type == InferredType.ARRAY
        assert by_name["APP_CONFIG"].inferred_type == InferredType.JSON
        assert by_name["LOG_LEVEL"].access_idiom == AccessIdiom.DIRECT
        assert by_name[DYNAMIC_NAME].location.line == 13
        assert all(not u.is_client_side for u in usages)

    def test_syntax_error_falls_back(self):
        """Test that invalid Python is scanned line by line."""
        usages, used_fallback = scan_source("bad.py", 'def f(:\n    return os.getenv("TOKEN")\n', "python")
        assert used_fallback is True
        assert [u.name for u in usages] == ["TOKEN"]


class TestFallback:
    """Tests for the regex fallback."""

    def test_syntax_error_uses_fallback(self):
        """Test that a file with syntax errors still yields literal reads."""
        source = "const x = {;\nconst url = process.env.API_URL;"
        usages, used_fallback = scan_source("src/broken.js", source, "node")

        assert used_fallback is True
        assert len(usages) == 1
        assert usages[0].name == "API_URL"
        assert usages[0].location.line == 2
        assert usages[0].location.column == 24

    def test_unknown_extension_uses_fallback(self):
        """Test that files without a structural scanner use the fallback."""
        source = "<script>\nconst a = process.env.VUE_APP_X\n</script>"
        usages, used_fallback = scan_source("src/App.vue", source, "node")
        assert used_fallback is True
        assert [u.name for u in usages] == ["VUE_APP_X"]

    def test_structural_scan_reports_no_fallback(self):
        """Test the fallback flag on success."""
        _, used_fallback = scan_source("src/a.js", "process.env.A;", "node")
        assert used_fallback is False

    def test_garbage_never_raises(self):
        """Test that undecodable input is handled."""
        usages = scan_usages("src/a.js", b"\xff\xfe\x00{{{ process.env \x80")
        assert usages == []

    def test_lone_surrogate_never_raises(self):
        """Test that text which cannot be encoded as UTF-8 is still scanned."""
        usages = scan_usages("src/a.js", "const a = process.env.A; // \ud800")
        assert [u.name for u in usages] == ["A"]
        assert usages[0].location.column == 22


class TestScanFile:
    """Tests for scanning files from disk."""

    def test_relative_locations(self, write_files):
        """Test that absolute paths are reported relative to the root."""
        root = write_files({"src/a.js": "process.env.A;\n"})
        usages, used_fallback = scan_file(root / "src" / "a.js", root=root)
        assert used_fallback is False
        assert usages[0].location.file == "src/a.js"

    def test_too_large(self, write_files, monkeypatch):
        """Test that oversized files raise ScanError."""
        root = write_files({"src/a.js": "process.env.A;\n" * 10})
        monkeypatch.setattr("env_doctor.core.scanner.core.MAX_FILE_BYTES", 16)

        with pytest.raises(ScanError) as exc_info:
            scan_file(root / "src" / "a.js", root=root)
        assert exc_info.value.code == "SCAN_ERROR"


class TestUniqueNames:
    """Tests for get_unique_variable_names."""

    def test_first_seen_order_without_dynamic(self):
        """Test ordering and exclusion of dynamic reads."""
        source = "process.env.B; process.env[k]; process.env.A; process.env.B;"
        usages = scan_usages("src/a.js", source)
        assert get_unique_variable_names(usages) == ["B", "A"]
