# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI exit codes.

A completed release exits SUCCESS even when some targets failed to build or
publishing was skipped; the log says which. Non-zero means the run never
got going or stopped on something unexpected.
"""

SUCCESS: int = 0
CONFIG_ERROR: int = 2
RUNTIME_ERROR: int = 3
VALIDATION_ERROR: int = 4
