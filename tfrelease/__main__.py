# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Allow `python -m tfrelease`."""

from tfrelease.cli.main import main

if __name__ == "__main__":
    main()
