"""Tests for the vault backends."""

from __future__ import annotations

import os
import stat

import pytest

from prlog_store.dryrun import DryRunVault
from prlog_store.errors import DocumentReadFailure, DocumentWriteFailure, VaultUnavailable
from prlog_store.filesystem import FileVault
from prlog_store.readonly import ReadOnlyVault


# ---------------------------------------------------------------------------
# BaseVault behaviour (shared by both backends)
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("vault_cls", [FileVault, DryRunVault, ReadOnlyVault])
class TestRead:
    def test_missing_document_is_none(self, tmp_path, vault_cls):
        assert vault_cls(tmp_path).read("01-January") is None

    def test_reads_without_newline_translation(self, tmp_path, vault_cls):
        (tmp_path / "01-January.md").write_bytes(b"## PRs\r\n| a |\r\n")
        assert vault_cls(tmp_path).read("01-January") == "## PRs\r\n| a |\r\n"

    def test_symlink_refused(self, tmp_path, vault_cls):
        target = tmp_path / "target.md"
        target.write_text("x")
        os.symlink(target, tmp_path / "01-January.md")
        with pytest.raises(DocumentReadFailure):
            vault_cls(tmp_path).read("01-January")

    def test_undecodable_document(self, tmp_path, vault_cls):
        (tmp_path / "01-January.md").write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(DocumentReadFailure):
            vault_cls(tmp_path).read("01-January")

    def test_list_documents(self, tmp_path, vault_cls):
        for name in ("02-February.md", "01-January.md", "notes.md", "PR Log.md"):
            (tmp_path / name).write_text("")
        (tmp_path / "03-March.md").mkdir()
        assert vault_cls(tmp_path).list_documents() == ["01-January", "02-February"]

    def test_path_for(self, tmp_path, vault_cls):
        assert vault_cls(tmp_path).path_for("11-November") == tmp_path / "11-November.md"


# ---------------------------------------------------------------------------
# FileVault
# ---------------------------------------------------------------------------


class TestFileVault:
    def test_creates_root(self, tmp_path):
        root = tmp_path / "a" / "b"
        FileVault(root)
        assert root.is_dir()

    def test_root_symlink_refused(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        os.symlink(real, link)
        with pytest.raises(VaultUnavailable):
            FileVault(link)

    def test_root_under_a_file_is_unavailable(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(VaultUnavailable):
            FileVault(blocker / "vault")

    def test_commit_writes_text(self, tmp_path):
        vault = FileVault(tmp_path)
        vault.commit("01-January", "hello\r\nworld\n")
        assert (tmp_path / "01-January.md").read_bytes() == b"hello\r\nworld\n"

    def test_commit_leaves_no_temp_files(self, tmp_path):
        vault = FileVault(tmp_path)
        vault.commit("01-January", "one\n")
        vault.commit("01-January", "two\n")
        assert [p.name for p in tmp_path.iterdir()] == ["01-January.md"]

    def test_commit_keeps_existing_mode(self, tmp_path):
        path = tmp_path / "01-January.md"
        path.write_text("old\n")
        os.chmod(path, 0o600)
        FileVault(tmp_path).commit("01-January", "new\n")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_failed_replace_keeps_old_document(self, tmp_path, mocker):
        path = tmp_path / "01-January.md"
        path.write_text("old\n")
        mocker.patch("prlog_store.filesystem.os.replace", side_effect=OSError("rename failed"))
        with pytest.raises(DocumentWriteFailure):
            FileVault(tmp_path).commit("01-January", "new\n")
        assert path.read_text() == "old\n"
        assert [p.name for p in tmp_path.iterdir()] == ["01-January.md"]

    def test_symlinked_document_not_written(self, tmp_path):
        target = tmp_path / "target.md"
        target.write_text("keep\n")
        os.symlink(target, tmp_path / "01-January.md")
        with pytest.raises(DocumentWriteFailure):
            FileVault(tmp_path).commit("01-January", "overwrite\n")
        assert target.read_text() == "keep\n"

    def test_close_is_safe(self, tmp_path):
        FileVault(tmp_path).close()


# ---------------------------------------------------------------------------
# DryRunVault
# ---------------------------------------------------------------------------


class TestDryRunVault:
    def test_does_not_create_root(self, tmp_path):
        root = tmp_path / "missing"
        DryRunVault(root)
        assert not root.exists()

    def test_commit_only_records_pending_text(self, tmp_path):
        path = tmp_path / "01-January.md"
        path.write_text("old\n")
        mtime = path.stat().st_mtime_ns
        vault = DryRunVault(tmp_path)
        vault.commit("01-January", "new\n")
        assert vault.pending == {"01-January": "new\n"}
        assert path.read_text() == "old\n"
        assert path.stat().st_mtime_ns == mtime

    def test_missing_root_lists_nothing(self, tmp_path):
        assert DryRunVault(tmp_path / "missing").list_documents() == []

    def test_flags(self, tmp_path):
        assert DryRunVault(tmp_path).dry_run is True
        assert FileVault(tmp_path).dry_run is False


# ---------------------------------------------------------------------------
# ReadOnlyVault
# ---------------------------------------------------------------------------


class TestReadOnlyVault:
    def test_commit_refused(self, tmp_path):
        path = tmp_path / "01-January.md"
        path.write_text("old\n")
        with pytest.raises(DocumentWriteFailure):
            ReadOnlyVault(tmp_path).commit("01-January", "new\n")
        assert path.read_text() == "old\n"

    def test_does_not_create_root(self, tmp_path):
        root = tmp_path / "missing"
        assert ReadOnlyVault(root).list_documents() == []
        assert not root.exists()
