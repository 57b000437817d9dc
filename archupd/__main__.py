"""
Allow running archupd with ``python -m archupd``.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import sys

from .cli.main import main

sys.exit(main())
