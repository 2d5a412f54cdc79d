"""Shared fixtures: a config and a fake tool layer that records calls."""

import pytest

from lvbackup.config import Config


class FakeTools:
    """Stand-in for SystemTools.

    Exit statuses are scripted per (operation, argument) through
    ``fail``, exceptions through ``raise_on``; everything not scripted
    succeeds.  Every call is appended to ``calls`` as a tuple.
    """

    def __init__(self):
        self.calls = []
        self.failures = {}
        self.exceptions = {}
        self.existing_snapshots = set()
        self.snapshots = []

    def fail(self, operation, key=None, returncode=1):
        self.failures[(operation, key)] = returncode

    def raise_on(self, operation, exc, key=None):
        self.exceptions[(operation, key)] = exc

    def _result(self, operation, key):
        for k in ((operation, key), (operation, None)):
            if k in self.exceptions:
                raise self.exceptions[k]
        for k in ((operation, key), (operation, None)):
            if k in self.failures:
                return self.failures[k]
        return 0

    def create_snapshot(self, source_device_path, name, size_spec):
        self.calls.append(("create", source_device_path, name, size_spec))
        return self._result("create", source_device_path)

    def remove_snapshot(self, snapshot_device_path):
        self.calls.append(("remove", snapshot_device_path))
        return self._result("remove", snapshot_device_path)

    def snapshot_exists(self, snapshot_device_path):
        self.calls.append(("exists", snapshot_device_path))
        return snapshot_device_path in self.existing_snapshots

    def list_snapshots(self):
        return list(self.snapshots)

    def mount(self, device_path, mount_point):
        self.calls.append(("mount", device_path, mount_point))
        return self._result("mount", device_path)

    def unmount(self, mount_point):
        self.calls.append(("unmount", mount_point))
        return self._result("unmount", mount_point)

    def copy(self, args, local_path, remote_spec):
        self.calls.append(("copy", list(args), local_path, remote_spec))
        return self._result("copy", remote_spec)

    def run_remote(self, host, command):
        self.calls.append(("remote", host, command))
        return self._result("remote", command)

    def operations(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def config_dict(tmp_path):
    return {
        "settings": {
            "volume-group": "vg0",
            "remote-host": "backup.example.com",
            "backup-root": "/srv/backup",
            "snapshot-name": "snap",
            "snapshot-size": "2G",
            "mount-point": "/mnt/snap",
            "lock-file": str(tmp_path / "lvbackup.lock"),
            "volumes": ["root", "home"],
            "rsync-args": ["--archive", "--compress", "--delete", "--partial"],
            "rsync-exclude": ["/lost+found"],
        },
        "exclude": {
            "root": ["/tmp/*", "/var/cache/*"],
            "/home/": ["*/.cache"],
        },
    }


@pytest.fixture
def config(config_dict):
    return Config(config_dict)


@pytest.fixture
def tools():
    return FakeTools()
