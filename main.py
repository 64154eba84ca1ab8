#!/usr/bin/env python3
"""
Main launcher for 1cmdcc.

Simple entry point that starts the link capture listener.
"""

from clipper import main
import asyncio
import sys

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
