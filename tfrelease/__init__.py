# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
tfrelease: release automation for Terraform provider plugins.

Cross-compiles a provider for the Terraform Registry platform matrix, zips
each binary, writes and signs the SHA256SUMS manifest, and publishes the
result as a GitHub release.
"""

__version__ = "0.1.0"
