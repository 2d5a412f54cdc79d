#
# lvbackup - snapshot-consistent backup of LVM volumes to a remote host
#
# Copyright (c) 2014-2021 Carnegie Mellon University
#
# SPDX-License-Identifier: GPL-2.0-only
#
# This program is free software; you can redistribute it and/or modify it
# under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of MERCHANTABILITY
# or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License
# for more details.
#
# You should have received a copy of the GNU General Public License along
# with this program; if not, write to the Free Software Foundation, Inc.,
# 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.
#

import sys
from contextlib import contextmanager
from enum import Enum

import click

from .command import pass_config
from .config import Config
from .errors import SnapshotFailed, TeardownError
from .tools import SystemTools


class SessionState(Enum):
    UNSTARTED = 0
    CREATED = 1
    MOUNTED = 2
    SYNCING = 3
    UNMOUNTED = 4
    REMOVED = 5
    FAILED = -1


class SnapshotSession:
    """Live state of the one snapshot currently in flight."""

    def __init__(self, volume, snapshot_device_path, mount_point, size_spec):
        self.volume = volume
        self.snapshot_device_path = snapshot_device_path
        self.mount_point = mount_point
        self.size_spec = size_spec
        self.state = SessionState.UNSTARTED
        # Which acquisitions succeeded, so that only those are released
        self.created = False
        self.mounted = False
        self.unwind_error = None
        self.errors = []

    def __repr__(self):
        return (
            f"SnapshotSession({self.volume.name!r}, "
            f"{self.snapshot_device_path!r}, {self.state.name})"
        )

    def advance(self, state):
        if self.state is SessionState.FAILED or state.value <= self.state.value:
            raise RuntimeError(
                f"Invalid snapshot transition {self.state.name} -> {state.name}"
            )
        self.state = state

    def fail(self):
        self.state = SessionState.FAILED


class SnapshotController:
    def __init__(self, config, tools):
        self._config = config
        self._tools = tools

    def create(self, volume):
        session = SnapshotSession(
            volume,
            self._config.snapshot_device_path,
            self._config.mount_point,
            self._config.snapshot_size,
        )
        ret, error = self._call(
            self._tools.create_snapshot,
            volume.source_device_path,
            self._config.snapshot_name,
            session.size_spec,
        )
        if ret:
            session.fail()
            raise SnapshotFailed(
                volume,
                f"Couldn't create snapshot {session.snapshot_device_path}: "
                f"lvcreate {error}",
            )
        session.created = True
        session.advance(SessionState.CREATED)
        return session

    def mount(self, session):
        try:
            ret = self._tools.mount(session.snapshot_device_path, session.mount_point)
        except BaseException as e:
            self._unwind_create(session)
            if not isinstance(e, Exception):
                raise
            raise SnapshotFailed(
                session.volume,
                f"Couldn't mount {session.snapshot_device_path} on "
                f"{session.mount_point}: {e}{self._left_behind(session)}",
            ) from e
        if ret:
            self._unwind_create(session)
            raise SnapshotFailed(
                session.volume,
                f"Couldn't mount {session.snapshot_device_path} on "
                f"{session.mount_point}: mount returned {ret}"
                f"{self._left_behind(session)}",
            )
        session.mounted = True
        session.advance(SessionState.MOUNTED)

    def _call(self, func, *args):
        # Returns (status, description).  A tool that can't be started
        # counts as a failed step.
        try:
            ret = func(*args)
        except OSError as e:
            return -1, f"failed: {e}"
        return ret, f"returned {ret}"

    def _unwind_create(self, session):
        session.fail()
        ret, error = self._call(
            self._tools.remove_snapshot, session.snapshot_device_path
        )
        if ret:
            session.unwind_error = f"lvremove {error}"
        else:
            session.created = False

    def _left_behind(self, session):
        if session.created:
            return f"; {session.unwind_error}, snapshot left behind"
        return ""

    def teardown(self, session):
        # Unmount and removal are attempted independently; a failure of
        # one does not skip the other.
        errors = []
        if session.mounted:
            ret, error = self._call(self._tools.unmount, session.mount_point)
            if ret:
                errors.append(
                    TeardownError(
                        session.volume,
                        f"Couldn't unmount {session.mount_point}: umount {error}",
                    )
                )
            else:
                session.mounted = False
                session.advance(SessionState.UNMOUNTED)
        if session.created:
            ret, error = self._call(
                self._tools.remove_snapshot, session.snapshot_device_path
            )
            if ret:
                errors.append(
                    TeardownError(
                        session.volume,
                        f"Couldn't remove snapshot {session.snapshot_device_path}: "
                        f"lvremove {error}",
                    )
                )
            else:
                session.created = False
                if session.state is not SessionState.FAILED:
                    session.advance(SessionState.REMOVED)
        if errors:
            session.fail()
            for error in errors:
                sys.stderr.write(f"Failed:  {error}\n")
        session.errors.extend(errors)
        return errors

    @contextmanager
    def acquire(self, volume):
        """Create and mount a snapshot of the volume, and always release
        whatever was acquired on the way out."""
        session = self.create(volume)
        self.mount(session)
        try:
            yield session
        finally:
            self.teardown(session)


@click.command()
@pass_config
def ls(config):
    """list snapshots left behind by lvbackup"""
    tools = SystemTools(Config(config))
    for snapshot in tools.list_snapshots():
        print(snapshot)


@click.command()
@pass_config
def cleanup(config):
    """unmount and remove a snapshot left behind by an aborted run"""
    config = Config(config)
    tools = SystemTools(config)
    failed = False
    ret = tools.unmount(config.mount_point)
    if ret:
        sys.stderr.write(
            f"Couldn't unmount {config.mount_point}: umount returned {ret}\n"
        )
        failed = True
    if tools.snapshot_exists(config.snapshot_device_path):
        ret = tools.remove_snapshot(config.snapshot_device_path)
        if ret:
            sys.stderr.write(
                f"Couldn't remove snapshot {config.snapshot_device_path}: "
                f"lvremove returned {ret}\n"
            )
            failed = True
    if failed:
        sys.exit(1)
