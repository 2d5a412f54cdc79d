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

from pathlib import Path

import click
import yaml

from .errors import InvalidVolumeName
from .volume import normalize_name

DEFAULT_RSYNC_ARGS = (
    "--archive",
    "--compress",
    "--delete",
    "--partial",
    "--numeric-ids",
    "--hard-links",
    "--one-file-system",
)
DEFAULT_SSH_OPTIONS = ("-o", "BatchMode=yes", "-o", "StrictHostKeyChecking=no")


def load_config(path):
    with Path(path).open() as fh:
        config = yaml.safe_load(fh)
    if not isinstance(config, dict):
        raise click.UsageError(f"Config file {path} is not a mapping")
    return config


class Config:
    """Settings for one run, read once from the YAML config file."""

    def __init__(self, config):
        settings = config.get("settings") or {}

        def required(key):
            try:
                value = settings[key]
            except KeyError:
                raise click.UsageError(f"Missing required setting '{key}'")
            if not value:
                raise click.UsageError(f"Setting '{key}' must not be empty")
            return str(value)

        self.volume_group = required("volume-group")
        self.remote_host = required("remote-host")
        self.backup_root = required("backup-root").rstrip("/")
        self.remote_user = str(settings.get("remote-user", "root"))
        self.snapshot_name = str(settings.get("snapshot-name", "lvbackup-snap"))
        if "/" in self.snapshot_name:
            raise click.UsageError(f"Invalid snapshot name: {self.snapshot_name}")
        self.snapshot_size = str(settings.get("snapshot-size", "1G"))
        self.mount_point = str(settings.get("mount-point", "/mnt/lvbackup"))
        self.lock_file = str(settings.get("lock-file", "/run/lock/lvbackup.lock"))
        self.volumes = tuple(str(v) for v in settings.get("volumes", []))
        self.rsync_args = tuple(settings.get("rsync-args", DEFAULT_RSYNC_ARGS))
        self.rsync_binary = settings.get("rsync-local-binary") or "rsync"
        self.ssh_options = tuple(settings.get("ssh-options", DEFAULT_SSH_OPTIONS))
        self.global_exclude = tuple(settings.get("rsync-exclude", []))
        self.volume_exclude = {}
        for name, patterns in (config.get("exclude") or {}).items():
            try:
                name = normalize_name(str(name))
            except InvalidVolumeName as e:
                raise click.UsageError(f"Bad exclude entry: {e}")
            self.volume_exclude[name] = tuple(patterns or [])

    @property
    def volume_group_device_path(self):
        return f"/dev/{self.volume_group}"

    @property
    def snapshot_device_path(self):
        return f"{self.volume_group_device_path}/{self.snapshot_name}"

    @property
    def remote(self):
        return f"{self.remote_user}@{self.remote_host}"
