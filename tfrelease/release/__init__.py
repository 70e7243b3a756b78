# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release subsystem for tfrelease.

Provides target resolution, cross-compilation, archiving, checksum manifest
generation, signing, verification, and publishing. Every stage reads only
what the previous stage left in the output directory.
"""
