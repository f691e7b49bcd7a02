"""Unit tests for source file discovery."""

from env_doctor.core.discovery import build_spec, discover_source_files, expand_braces
from env_doctor.core.frameworks import FRAMEWORKS
from env_doctor.utils.config import DEFAULT_EXCLUDE


class TestExpandBraces:
    """Tests for brace expansion."""

    def test_no_braces(self):
        """Test that plain patterns pass through."""
        assert expand_braces("src/**/*.ts") == ["src/**/*.ts"]

    def test_single_group(self):
        """Test one alternative group."""
        assert expand_braces("src/**/*.{ts,js}") == ["src/**/*.ts", "src/**/*.js"]

    def test_multiple_groups(self):
        """Test the product of several groups."""
        assert expand_braces("{src,lib}/*.{ts,js}") == [
            "src/*.ts",
            "src/*.js",
            "lib/*.ts",
            "lib/*.js",
        ]

    def test_build_spec(self):
        """Test that expanded patterns match."""
        spec = build_spec(["src/**/*.{ts,tsx}", "", "  "])
        assert spec.match_file("src/components/A.tsx")
        assert spec.match_file("src/a.ts")
        assert not spec.match_file("src/a.js")


class TestDiscoverSourceFiles:
    """Tests for discover_source_files."""

    def test_framework_defaults(self, write_files):
        """Test discovery with the default include and exclude globs."""
        root = write_files(
            {
                "src/a.ts": "",
                "src/lib/b.js": "",
                "src/notes.txt": "",
                "src/a.test.ts": "",
                "src/__tests__/c.ts": "",
                "scripts/outside.js": "",
                "node_modules/pkg/index.js": "",
                "src/node_modules/pkg/inner.js": "",
            }
        )
        files = discover_source_files(root, FRAMEWORKS["node"].source_globs, DEFAULT_EXCLUDE)
        relative = [f.relative_to(root.resolve()).as_posix() for f in files]
        assert relative == ["src/a.ts", "src/lib/b.js"]

    def test_results_are_sorted_absolute(self, write_files):
        """Test ordering and absoluteness."""
        root = write_files({"b.py": "", "a.py": "", "pkg/c.py": ""})
        files = discover_source_files(root, ["**/*.py"])
        assert all(f.is_absolute() for f in files)
        assert files == sorted(files)
        assert len(files) == 3

    def test_excluded_directory_not_descended(self, write_files):
        """Test directory exclusion by name."""
        root = write_files({"build/out.py": "", "app.py": ""})
        files = discover_source_files(root, ["**/*.py"], ["build"])
        assert [f.name for f in files] == ["app.py"]
