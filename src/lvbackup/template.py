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

import os
import sys
from getpass import getuser

import click

TEMPLATES = {
    "config": """
settings:
  # Local volume group holding the volumes to back up
  volume-group: vg0
  snapshot-name: lvbackup-snap
  snapshot-size: 5G
  mount-point: /mnt/lvbackup
  remote-host: backup.example.com
  remote-user: root
  # Volumes land in <backup-root>/<volume-group>/<volume>
  backup-root: /srv/backup
  volumes:
    - root
    - home
  rsync-exclude:
    - /lost+found

exclude:
  root:
    - /tmp/*
    - /var/cache/*
  home:
    - "*/.cache"
""",
    "crontab": """
MAILTO = %(email)s

0 1 * * * %(prog)s run >/dev/null && echo "OK"
""",
    "sudoers": """
# Allow lvbackup to create, remove, mount, and unmount snapshot volumes
%(user)s ALL=NOPASSWD: /sbin/lvs, /sbin/lvcreate, /sbin/lvremove, /bin/mount, /bin/umount
# Allow running sudo from cron
Defaults:%(user)s !requiretty
""",
}


def render(name, email="root"):
    # Only crontab and sudoers carry %(...)s fields; the config template
    # is printed as-is.
    values = {
        "user": getuser(),
        "prog": os.path.abspath(sys.argv[0]),
        "email": email,
    }
    return TEMPLATES[name].strip() % values


@click.command()
@click.option("--email", default="root", help="address cron mails reports to")
@click.argument("name", metavar="TEMPLATE", type=click.Choice(sorted(TEMPLATES)))
def mkconf(email, name):
    """print a config, crontab, or sudoers template"""
    print(render(name, email))
