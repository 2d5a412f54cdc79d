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

from .errors import InvalidVolumeName


def normalize_name(raw_name):
    # Strip at most one separator from each end.  Other separators are
    # not supported in volume names and are passed through unchecked.
    name = raw_name
    if name.startswith("/"):
        name = name[1:]
    if name.endswith("/"):
        name = name[:-1]
    if not name:
        raise InvalidVolumeName(raw_name)
    return name


class Volume:
    def __init__(self, name, source_device_path, destination_path):
        self.name = name
        self.source_device_path = source_device_path
        self.destination_path = destination_path

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"Volume({self.name!r})"

    def __eq__(self, other):
        return (
            isinstance(other, Volume)
            and self.name == other.name
            and self.source_device_path == other.source_device_path
            and self.destination_path == other.destination_path
        )

    def __hash__(self):
        return hash((self.name, self.source_device_path, self.destination_path))


def resolve(raw_name, config):
    """Build the Volume for a requested name.

    The source device lives in the local volume group; the destination is
    <backup-root>/<volume-group>/<name> on the remote host.
    """
    name = normalize_name(raw_name)
    return Volume(
        name,
        f"{config.volume_group_device_path}/{name}",
        f"{config.backup_root}/{config.volume_group}/{name}",
    )
