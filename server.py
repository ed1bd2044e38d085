#!/usr/bin/env python3
"""
Local entrypoint for the launchpad returns simulator API.

The application lives under `launchpad_app/`.
Run with `python3 server.py`.
"""

from launchpad_app.main import app, run


if __name__ == "__main__":
    run()
