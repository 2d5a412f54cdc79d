"""Tests for the snapshot lifecycle controller."""

import pytest

from lvbackup.errors import SnapshotFailed, TeardownError
from lvbackup.snapshot import SessionState, SnapshotController, SnapshotSession
from lvbackup.volume import resolve


@pytest.fixture
def controller(config, tools):
    return SnapshotController(config, tools)


@pytest.fixture
def volume(config):
    return resolve("home", config)


def test_create(controller, tools, volume):
    session = controller.create(volume)
    assert session.state is SessionState.CREATED
    assert session.snapshot_device_path == "/dev/vg0/snap"
    assert session.mount_point == "/mnt/snap"
    assert session.size_spec == "2G"
    assert tools.calls == [("create", "/dev/vg0/home", "snap", "2G")]


def test_create_failure(controller, tools, volume):
    tools.fail("create", returncode=5)
    with pytest.raises(SnapshotFailed) as excinfo:
        controller.create(volume)
    assert excinfo.value.volume is volume
    assert "lvcreate returned 5" in str(excinfo.value)
    # Nothing to unwind
    assert tools.operations() == ["create"]


def test_mount(controller, tools, volume):
    session = controller.create(volume)
    controller.mount(session)
    assert session.state is SessionState.MOUNTED
    assert tools.calls[-1] == ("mount", "/dev/vg0/snap", "/mnt/snap")


def test_mount_failure_removes_snapshot(controller, tools, volume):
    tools.fail("mount")
    session = controller.create(volume)
    with pytest.raises(SnapshotFailed):
        controller.mount(session)
    assert session.state is SessionState.FAILED
    assert tools.operations() == ["create", "mount", "remove"]
    assert not session.created


def test_mount_failure_reports_stuck_snapshot(controller, tools, volume):
    tools.fail("mount")
    tools.fail("remove", returncode=3)
    session = controller.create(volume)
    with pytest.raises(SnapshotFailed) as excinfo:
        controller.mount(session)
    assert "snapshot left behind" in str(excinfo.value)
    assert session.created


def test_teardown(controller, tools, volume):
    session = controller.create(volume)
    controller.mount(session)
    session.advance(SessionState.SYNCING)
    assert controller.teardown(session) == []
    assert session.state is SessionState.REMOVED
    assert tools.operations()[-2:] == ["unmount", "remove"]


def test_teardown_unmount_failure_still_removes(controller, tools, volume):
    tools.fail("unmount")
    tools.fail("remove")
    session = controller.create(volume)
    controller.mount(session)
    session.advance(SessionState.SYNCING)
    errors = controller.teardown(session)
    assert tools.operations()[-2:] == ["unmount", "remove"]
    assert len(errors) == 2
    assert all(isinstance(e, TeardownError) for e in errors)
    assert "umount" in str(errors[0])
    assert "lvremove" in str(errors[1])
    assert session.errors == errors
    assert session.state is SessionState.FAILED


def test_teardown_only_releases_acquired(controller, tools, volume):
    session = controller.create(volume)
    controller.teardown(session)
    assert tools.operations() == ["create", "remove"]


def test_acquire_releases_on_exception(controller, tools, volume):
    with pytest.raises(RuntimeError):
        with controller.acquire(volume) as session:
            session.advance(SessionState.SYNCING)
            raise RuntimeError("boom")
    assert tools.operations() == ["create", "mount", "unmount", "remove"]
    assert session.state is SessionState.REMOVED


def test_acquire_create_failure_does_not_yield(controller, tools, volume):
    tools.fail("create")
    with pytest.raises(SnapshotFailed):
        with controller.acquire(volume):
            pytest.fail("should not get here")
    assert tools.operations() == ["create"]


def test_session_transitions_only_forward(volume):
    session = SnapshotSession(volume, "/dev/vg0/snap", "/mnt/snap", "1G")
    session.advance(SessionState.CREATED)
    session.advance(SessionState.MOUNTED)
    with pytest.raises(RuntimeError):
        session.advance(SessionState.CREATED)
    session.fail()
    with pytest.raises(RuntimeError):
        session.advance(SessionState.SYNCING)


def test_mount_exception_removes_snapshot(controller, tools, volume):
    tools.raise_on("mount", PermissionError(13, "Permission denied"))
    session = controller.create(volume)
    with pytest.raises(SnapshotFailed) as excinfo:
        controller.mount(session)
    assert isinstance(excinfo.value.__cause__, PermissionError)
    assert session.state is SessionState.FAILED
    assert tools.operations() == ["create", "mount", "remove"]
    assert not session.created


def test_mount_interrupted_removes_snapshot(controller, tools, volume):
    tools.raise_on("mount", KeyboardInterrupt())
    session = controller.create(volume)
    with pytest.raises(KeyboardInterrupt):
        controller.mount(session)
    assert tools.operations() == ["create", "mount", "remove"]


def test_create_exception_is_snapshot_failure(controller, tools, volume):
    tools.raise_on("create", FileNotFoundError(2, "No such file", "lvcreate"))
    with pytest.raises(SnapshotFailed):
        controller.create(volume)
    assert tools.operations() == ["create"]


def test_teardown_unmount_exception_still_removes(controller, tools, volume):
    tools.raise_on("unmount", OSError(12, "Cannot allocate memory"))
    with controller.acquire(volume) as session:
        session.advance(SessionState.SYNCING)
    assert tools.operations() == ["create", "mount", "unmount", "remove"]
    assert len(session.errors) == 1
    assert "Cannot allocate memory" in str(session.errors[0])
    assert session.state is SessionState.FAILED
    assert not session.created
