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

"""Thin wrappers around the external tools lvbackup drives.

Every method returns the tool's exit status; callers decide what a
failure means.
"""

import os
import re
import shlex
import subprocess
import sys

from .util import make_dir_path

SNAPSHOT_TAG = "lvbackup-snapshot"

# Filter out spurious log output from
# https://bugzilla.samba.org/show_bug.cgi?id=10496
_SPURIOUS_RSYNC = re.compile(r"[.h][dfL]\.{8}x ")


def privileged(args):
    if os.geteuid() == 0:
        return list(args)
    return ["sudo"] + list(args)


class SystemTools:
    def __init__(self, config):
        self._config = config

    def _call(self, args, quiet=False):
        print(" ".join(shlex.quote(a) for a in args))
        with open("/dev/null", "r+") as null:
            return subprocess.call(args, stdin=null, stdout=null if quiet else None)

    def create_snapshot(self, source_device_path, name, size_spec):
        size_flag = "-l" if "%" in size_spec else "-L"
        return self._call(
            privileged(
                [
                    "lvcreate",
                    "-s",
                    size_flag,
                    size_spec,
                    "-n",
                    name,
                    "--addtag",
                    SNAPSHOT_TAG,
                    source_device_path,
                ]
            )
        )

    def remove_snapshot(self, snapshot_device_path):
        return self._call(privileged(["lvremove", "--force", snapshot_device_path]))

    def snapshot_exists(self, snapshot_device_path):
        with open("/dev/null", "r+") as null:
            ret = subprocess.call(
                privileged(["lvs", snapshot_device_path]), stdout=null, stderr=null
            )
        return ret == 0

    def list_snapshots(self):
        try:
            out = subprocess.check_output(
                privileged(
                    ["lvs", "--noheadings", "-o", "vg_name,lv_name", "@" + SNAPSHOT_TAG]
                )
            ).decode(sys.stdout.encoding or "utf-8")
        except subprocess.CalledProcessError:
            raise OSError("Couldn't list snapshot LVs")

        ret = []
        for line in out.split("\n"):
            if not line.strip():
                continue
            vg, lv = line.split()
            ret.append(f"{vg}/{lv}")
        return sorted(ret)

    def mount(self, device_path, mount_point):
        make_dir_path(mount_point)
        return self._call(privileged(["mount", "-o", "ro", device_path, mount_point]))

    def unmount(self, mount_point):
        # Already unmounted is not an error
        if not os.path.ismount(mount_point):
            return 0
        return self._call(privileged(["umount", mount_point]))

    def copy(self, args, local_path, remote_spec):
        cmd = [self._config.rsync_binary]
        cmd.extend(args)
        cmd.append("--rsh=" + " ".join(["ssh"] + list(self._config.ssh_options)))
        cmd.extend([local_path, remote_spec])
        print(" ".join(cmd))
        proc = subprocess.Popen(cmd, stdout=subprocess.PIPE)
        for line in proc.stdout:
            line = line.decode(sys.stdout.encoding or "utf-8", "replace")
            if not _SPURIOUS_RSYNC.match(line):
                print(line.rstrip())
        return proc.wait()

    def run_remote(self, host, command):
        args = ["ssh"]
        args.extend(self._config.ssh_options)
        args.extend([host, command])
        return self._call(args)
