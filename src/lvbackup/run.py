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

import shlex
import sys

import click

from .command import pass_config
from .config import Config
from .errors import (
    InvalidVolumeName,
    PreconditionFailed,
    SnapshotFailed,
    TransferFailed,
)
from .exclude import ExclusionRegistry
from .snapshot import SnapshotController
from .tools import SystemTools
from .transfer import Outcome, TransferExecutor
from .util import lockfile
from .volume import resolve


class VolumeResult:
    def __init__(self, volume, outcome, error=None, teardown_errors=()):
        self.volume = volume
        self.outcome = outcome
        self.error = error
        self.teardown_errors = list(teardown_errors)

    def __repr__(self):
        return f"VolumeResult({self.volume.name!r}, {self.outcome.name})"

    @property
    def success(self):
        return self.outcome is Outcome.SUCCEEDED and not self.teardown_errors


class RunResult:
    def __init__(self):
        self.results = []
        self.aborted = False

    def __iter__(self):
        return iter(self.results)

    def __len__(self):
        return len(self.results)

    def record(self, result):
        self.results.append(result)

    @property
    def outcomes(self):
        return [(r.volume.name, r.outcome) for r in self.results]

    @property
    def success(self):
        return not self.aborted and all(r.success for r in self.results)

    def report(self):
        for result in self.results:
            status = result.outcome.value
            if result.teardown_errors:
                status += f", {len(result.teardown_errors)} teardown error(s)"
            print("%-20s %s" % (result.volume.name + ":", status))
        if self.aborted:
            print("Run aborted")


class RunController:
    """Back up volumes one at a time.

    Each volume's snapshot is torn down before the next one is created;
    the snapshot LV name is fixed, so only one session may exist.  A
    missing remote destination or a snapshot that can't be created or
    mounted stops the whole run.
    """

    def __init__(self, config, tools, dry_run=False):
        self._config = config
        self._tools = tools
        self._snapshots = SnapshotController(config, tools)
        self._transfer = TransferExecutor(config, tools, dry_run=dry_run)
        self._session = None

    def resolve_all(self, volume_names):
        return [resolve(name, self._config) for name in volume_names]

    def check_destination(self, volume):
        path = volume.destination_path
        ret = self._tools.run_remote(
            self._config.remote, "test -d " + shlex.quote(path)
        )
        if ret:
            raise PreconditionFailed(
                volume,
                f"Remote destination {self._config.remote_host}:{path} "
                "is not a directory",
            )

    def run(self, volume_names):
        volumes = self.resolve_all(volume_names)
        exclusions = ExclusionRegistry.from_config(
            self._config, [v.name for v in volumes]
        )
        result = RunResult()
        for volume in volumes:
            print(f"Starting {volume}")
            try:
                volume_result = self._back_up(volume, exclusions.get(volume.name))
            except PreconditionFailed as e:
                volume_result = VolumeResult(volume, Outcome.PRECONDITION_FAILED, e)
                result.aborted = True
            except SnapshotFailed as e:
                volume_result = VolumeResult(volume, Outcome.SNAPSHOT_FAILED, e)
                result.aborted = True
            if volume_result.error is not None:
                sys.stderr.write(f"Failed:  {volume}\n   {volume_result.error}\n")
            result.record(volume_result)
            print(f"Ending   {volume}")
            if result.aborted:
                break
        return result

    def _back_up(self, volume, exclusions):
        self.check_destination(volume)
        if self._session is not None:
            raise RuntimeError(
                f"Snapshot session for {self._session.volume} is still active"
            )
        try:
            with self._snapshots.acquire(volume) as session:
                self._session = session
                outcome, ret = self._transfer.transfer(session, volume, exclusions)
        finally:
            self._session = None
        error = None
        if outcome is Outcome.TRANSFER_FAILED:
            error = TransferFailed(volume, ret)
        return VolumeResult(volume, outcome, error, session.errors)


def get_volume_names(config, volumes):
    names = volumes or config.volumes
    if not names:
        raise click.UsageError("No volumes specified and no default volumes set")
    return names


@click.command()
@click.option(
    "-n",
    "--dry-run",
    is_flag=True,
    help="create and mount snapshots but don't transfer any data",
)
@click.argument("volumes", nargs=-1)
@pass_config
def run(config, dry_run, volumes):
    """back up logical volumes

    VOLUMES overrides the default volume list from the config file.
    """
    config = Config(config)
    names = get_volume_names(config, volumes)
    with lockfile(config.lock_file):
        controller = RunController(config, SystemTools(config), dry_run=dry_run)
        try:
            result = controller.run(names)
        except InvalidVolumeName as e:
            raise click.UsageError(str(e))
    result.report()
    if not result.success:
        sys.exit(1)


@click.command()
@click.argument("volumes", nargs=-1)
@pass_config
def check(config, volumes):
    """check that remote backup destinations exist"""
    config = Config(config)
    names = get_volume_names(config, volumes)
    controller = RunController(config, SystemTools(config))
    try:
        resolved = controller.resolve_all(names)
    except InvalidVolumeName as e:
        raise click.UsageError(str(e))
    missing = False
    for volume in resolved:
        try:
            controller.check_destination(volume)
        except PreconditionFailed as e:
            sys.stderr.write(f"Missing: {e}\n")
            missing = True
    if missing:
        sys.exit(1)
