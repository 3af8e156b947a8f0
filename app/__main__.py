# SPDX-License-Identifier: MIT
# Copyright (c) 2025 miota contributors

"""Entry point for running the application as a module.

Usage:
    python -m app
"""

from app.cli import main

if __name__ == "__main__":
    main()
