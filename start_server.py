#!/usr/bin/env python3
"""Start script that honours the PORT environment variable set by hosting platforms."""

import os
import sys
import subprocess

from donorfinder.config import settings

port = os.environ.get("PORT", str(settings.port))

try:
    port_int = int(port)
except ValueError:
    print(f"Warning: Invalid PORT value '{port}', using default {settings.port}", file=sys.stderr)
    port_int = settings.port

cmd = [
    sys.executable,
    "-m",
    "uvicorn",
    "donorfinder.main:app",
    "--host",
    "0.0.0.0",
    "--port",
    str(port_int),
    "--proxy-headers",
    "--forwarded-allow-ips", "*",
    "--log-level", settings.log_level.lower(),
]

print(f"Starting server on port {port_int}...", file=sys.stderr)
sys.exit(subprocess.call(cmd))
