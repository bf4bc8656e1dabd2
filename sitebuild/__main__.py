#!/usr/bin/env python3
"""
Entry point for running as module: python -m sitebuild
"""

from sitebuild.app import run


if __name__ == "__main__":
    run()
