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


class ExclusionRegistry:
    """Per-volume rsync exclude patterns.

    Patterns accumulate in the order they were merged; rsync applies all
    of them.  Every volume passed to ensure_defined() has an entry, even
    if it is empty, so get() never has to guess.
    """

    def __init__(self):
        self._patterns = {}

    @classmethod
    def from_config(cls, config, volume_names):
        registry = cls()
        for name in volume_names:
            registry.ensure_defined(name)
            registry.merge(name, *config.global_exclude)
        for name, patterns in config.volume_exclude.items():
            registry.merge(name, *patterns)
        return registry

    def merge(self, volume_name, *patterns):
        self._patterns.setdefault(volume_name, []).extend(patterns)

    def ensure_defined(self, volume_name):
        self._patterns.setdefault(volume_name, [])

    def get(self, volume_name):
        try:
            return tuple(self._patterns[volume_name])
        except KeyError:
            raise KeyError(f"No exclusions defined for volume {volume_name}")

    def __contains__(self, volume_name):
        return volume_name in self._patterns
