"""Tests for the directory bundle loader."""

import pytest

from autoeval.adapters.file_bundle import load_bundle, read_file_record
from autoeval.core.errors import BundleUnavailable


class TestLoadBundle:
    def test_reads_criteria_files(self, bundle_dir, criteria) -> None:
        bundle = load_bundle(str(bundle_dir), criteria)
        assert bundle.file_count == 6
        assert bundle.files["reflection.md"].exists is True
        assert bundle.files["reflection.md"].size > 0
        assert bundle.files["reflection.md"].last_modified.endswith("Z")
        assert bundle.producer_id is None

    def test_absent_files_recorded(self, bundle_dir, criteria) -> None:
        (bundle_dir / "work_log.md").unlink()
        bundle = load_bundle(str(bundle_dir), criteria)
        assert bundle.files["work_log.md"].exists is False
        assert "work_log.md" not in bundle.all_files

    def test_nested_files_listed(self, bundle_dir, criteria) -> None:
        (bundle_dir / "src").mkdir()
        (bundle_dir / "src" / "app.py").write_text("print('hi')\n", encoding="utf-8")
        bundle = load_bundle(str(bundle_dir), criteria)
        assert "src/app.py" in bundle.all_files
        assert bundle.file_count == 7
        assert bundle.total_size == sum(p.stat().st_size for p in bundle_dir.rglob("*") if p.is_file())

    def test_missing_directory(self, tmp_path, criteria) -> None:
        with pytest.raises(BundleUnavailable):
            load_bundle(str(tmp_path / "missing"), criteria)

    def test_file_instead_of_directory(self, tmp_path, criteria) -> None:
        f = tmp_path / "bundle.txt"
        f.write_text("x", encoding="utf-8")
        with pytest.raises(BundleUnavailable):
            load_bundle(str(f), criteria)


class TestReadFileRecord:
    def test_missing(self, tmp_path) -> None:
        record = read_file_record(tmp_path / "nope.md")
        assert record.exists is False
        assert record.content is None

    def test_invalid_utf8_replaced(self, tmp_path) -> None:
        p = tmp_path / "bin.txt"
        p.write_bytes(b"ok \xff\xfe end")
        record = read_file_record(p)
        assert record.exists is True
        assert record.size == 9
        assert "ok" in record.content
