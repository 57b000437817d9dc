"""
archupd - Arch Linux update assistant

Cleans the package cache, upgrades the system, shows what pacman changed
and which changelogs were updated, offers to remove orphaned packages and
reports new Arch Linux news fetched in the background.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

__version__ = "1.0.0"
