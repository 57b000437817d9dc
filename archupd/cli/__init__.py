"""
Command-line interface for archupd.
"""

# SPDX-License-Identifier: GPL-3.0-or-later
