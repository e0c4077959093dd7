import os

import pytest

from podpush import utils
from podpush.managers.image import storage
from podpush.managers.image.base import ImageNotFound, InconsistentManifestSet, InvalidImageMetadata
from podpush.managers.image.storage import ScratchStore, StorageReconciler

SCRATCH_OPTS = ["--root", "/tmp/scratch"]
OLDER = "2024-01-01 00:00:00.000000001 +0000 UTC"
NEWER = "2024-01-02 00:00:00 +0000 UTC"


@pytest.fixture
def reconciler(context):
    context.source_images = ["app:v1", "app:v2"]
    context.scratch_opts = list(SCRATCH_OPTS)
    return StorageReconciler(context)


def _not_manifests(executor):
    return executor.on("manifest", "exists", exit_code=1)


def test_all_manifests_short_circuits(reconciler, executor):
    result = reconciler.reconcile()

    assert result == {"is_manifest": True, "from_foreign": False}
    assert executor.calls_with("image", "exists") == []
    assert executor.calls_with("pull") == []


def test_mixed_manifests_raise(reconciler, executor):
    executor.on("manifest", "exists", "app:v2", exit_code=1)

    with pytest.raises(InconsistentManifestSet) as exc_info:
        reconciler.reconcile()
    assert "app:v2" in str(exc_info.value)


def test_foreign_newer_wins(reconciler, executor):
    _not_manifests(executor)
    executor.on("image", "inspect", "app:v1", stdout=OLDER)
    executor.on("image", "inspect", "docker.io/library/app:v1", stdout=NEWER)

    assert reconciler.reconcile() == {"is_manifest": False, "from_foreign": True}
    assert executor.calls_with(*SCRATCH_OPTS, "image", "inspect", "docker.io/library/app:v1")


def test_local_newer_wins(reconciler, executor):
    _not_manifests(executor)
    executor.on("image", "inspect", "app:v1", stdout=NEWER)
    executor.on("image", "inspect", "docker.io/library/app:v1", stdout=OLDER)

    assert reconciler.reconcile()["from_foreign"] is False


def test_equal_timestamps_prefer_local(reconciler, executor):
    _not_manifests(executor)
    executor.on("image", "inspect", stdout=NEWER)

    assert reconciler.reconcile()["from_foreign"] is False


def test_unparseable_created_timestamp_is_reported(reconciler, executor):
    _not_manifests(executor)
    executor.on("image", "inspect", "app:v1", stdout="<no value>")
    executor.on("image", "inspect", "docker.io/library/app:v1", stdout=NEWER)

    with pytest.raises(InvalidImageMetadata) as exc_info:
        reconciler.reconcile()
    assert "app:v1" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_only_local_skips_timestamp_query(reconciler, executor):
    _not_manifests(executor)
    executor.on("pull", exit_code=125)

    assert reconciler.reconcile() == {"is_manifest": False, "from_foreign": False}
    assert executor.calls_with("inspect") == []


def test_only_foreign_is_authoritative(reconciler, executor):
    _not_manifests(executor)
    executor.on("image", "exists", exit_code=1)

    assert reconciler.reconcile()["from_foreign"] is True
    assert executor.calls_with("inspect") == []
    assert executor.calls_with(*SCRATCH_OPTS, "pull", "docker-daemon:app:v1")


def test_missing_from_both_stores(reconciler, executor):
    _not_manifests(executor)
    executor.on("image", "exists", "app:v2", exit_code=1)
    executor.on("pull", "docker-daemon:app:v1", exit_code=125)

    with pytest.raises(ImageNotFound) as exc_info:
        reconciler.reconcile()
    message = str(exc_info.value)
    assert "\"app:v2\" 不在Podman镜像存储中" in message
    assert "\"app:v1\" 不在Docker镜像存储中" in message


def test_partial_presence_in_each_store_is_not_enough(reconciler, executor):
    _not_manifests(executor)
    executor.on("image", "exists", exit_code=1)
    executor.on("pull", exit_code=125)

    with pytest.raises(ImageNotFound) as exc_info:
        reconciler.reconcile()
    assert "app:v1, app:v2" in str(exc_info.value)


@pytest.fixture
def no_overlay(monkeypatch):
    monkeypatch.setattr(storage, "is_storage_driver_overlay", lambda: False)


def test_scratch_store_lifecycle(context, executor, no_overlay):
    with ScratchStore(context):
        root = context.scratch_root
        assert os.path.isdir(root)
        assert context.scratch_opts == ["--root", root]

    assert not os.path.exists(root)
    assert executor.calls_with("--root", root, "rmi", "-a", "-f")
    assert context.scratch_root is None


def test_scratch_store_removed_on_failure(context, executor, no_overlay):
    with pytest.raises(RuntimeError):
        with ScratchStore(context):
            root = context.scratch_root
            raise RuntimeError("push failed")

    assert not os.path.exists(root)
    assert executor.calls_with("rmi", "-a", "-f")


def test_scratch_store_cleanup_failure_is_only_a_warning(context, executor, no_overlay, log_warnings):
    executor.on("rmi", exit_code=1, stderr="busy")

    with ScratchStore(context):
        root = context.scratch_root

    assert any(root in message for message in log_warnings)
    os.rmdir(root)


def test_scratch_store_uses_fuse_overlayfs(context, monkeypatch):
    monkeypatch.setattr(storage, "is_storage_driver_overlay", lambda: True)
    monkeypatch.setattr(storage, "find_fuse_overlayfs_path", lambda: "/usr/bin/fuse-overlayfs")

    with ScratchStore(context):
        assert context.scratch_opts[2:] == ["--storage-opt", "overlay.mount_program=/usr/bin/fuse-overlayfs"]


def test_scratch_store_warns_without_fuse_overlayfs(context, monkeypatch, log_warnings):
    monkeypatch.setattr(storage, "is_storage_driver_overlay", lambda: True)
    monkeypatch.setattr(storage, "find_fuse_overlayfs_path", lambda: None)

    with ScratchStore(context):
        assert len(context.scratch_opts) == 2

    assert any("fuse-overlayfs" in message for message in log_warnings)


def test_scratch_store_removed_when_setup_fails(context, executor, monkeypatch):
    def broken_driver_check():
        raise OSError("permission denied")

    monkeypatch.setattr(storage, "is_storage_driver_overlay", broken_driver_check)
    roots = []
    executor.on("rmi", side_effect=lambda args: roots.append(args[1]))

    with pytest.raises(OSError):
        with ScratchStore(context):
            pass

    assert len(roots) == 1
    assert not os.path.exists(roots[0])
    assert context.scratch_root is None


def test_scratch_store_ignores_unparseable_storage_conf(context, executor, monkeypatch, tmp_path, log_warnings):
    storage_conf = tmp_path / "storage.conf"
    storage_conf.write_text("[storage\ndriver = overlay", encoding="utf-8")
    monkeypatch.setattr(utils, "storage_conf_paths", lambda: [str(storage_conf)])

    with ScratchStore(context):
        root = context.scratch_root
        assert context.scratch_opts == ["--root", root]

    assert not os.path.exists(root)
    assert any(str(storage_conf) in message for message in log_warnings)
