import pytest

from epubmanga.error import BuildEnvironmentError
from epubmanga.workspace import Workspace, WORKSPACE_PREFIX


def test_acquire_and_release(workspace_root):
    workspace = Workspace.acquire(workspace_root)
    assert workspace.path.is_dir()
    assert workspace.path.parent == workspace_root
    assert workspace.path.name.startswith(WORKSPACE_PREFIX)

    (workspace.path / "images").mkdir()
    (workspace.path / "images" / "a.png").write_bytes(b"x")

    workspace.release()
    assert not workspace.path.exists()
    # Idempotent
    workspace.release()


def test_workspaces_are_unique(workspace_root):
    first = Workspace.acquire(workspace_root)
    second = Workspace.acquire(workspace_root)
    try:
        assert first.path != second.path
    finally:
        first.release()
        second.release()


def test_context_manager_removes_on_error(workspace_root):
    with pytest.raises(RuntimeError):
        with Workspace.acquire(workspace_root) as workspace:
            (workspace.path / "page.xhtml").write_text("partial")
            raise RuntimeError("stage failed")
    assert list(workspace_root.iterdir()) == []


def test_acquire_failure(tmp_path):
    not_a_directory = tmp_path / "file"
    not_a_directory.write_text("")
    with pytest.raises(BuildEnvironmentError) as excinfo:
        Workspace.acquire(not_a_directory)
    assert excinfo.value.stage == "workspace"


def test_cleanup_failure_does_not_mask_build_error(workspace_root, monkeypatch):
    def broken_rmtree(path):
        raise PermissionError("busy")

    monkeypatch.setattr("epubmanga.workspace.shutil.rmtree", broken_rmtree)

    with pytest.raises(RuntimeError, match="stage failed"):
        with Workspace.acquire(workspace_root):
            raise RuntimeError("stage failed")


def test_cleanup_failure_after_success_is_reported(workspace_root, monkeypatch):
    def broken_rmtree(path):
        raise PermissionError("busy")

    monkeypatch.setattr("epubmanga.workspace.shutil.rmtree", broken_rmtree)

    with pytest.raises(BuildEnvironmentError):
        with Workspace.acquire(workspace_root):
            pass


def test_environment_error_keeps_os_error(tmp_path):
    not_a_directory = tmp_path / "file"
    not_a_directory.write_text("")
    with pytest.raises(BuildEnvironmentError) as excinfo:
        Workspace.acquire(not_a_directory)
    assert not isinstance(excinfo.value, OSError)
    assert isinstance(excinfo.value.original_error, OSError)
    assert excinfo.value.path == not_a_directory
