#!/usr/bin/env python3
"""
Start the store API
Usage:
    python3 start_app.py dev    # Development mode, auto reload
    python3 start_app.py prod   # Production mode, multiple workers
"""

import os
import subprocess
import sys


def build_command(env: str = "dev") -> list:
    port = os.environ.get("PORT", "8000")
    base = ["uv", "run", "uvicorn"] if os.path.exists("uv") else ["uvicorn"]

    if env == "prod":
        return base + ["main:app", "--host", "0.0.0.0", "--port", port, "--workers", "4"]
    return base + ["main:app", "--host", "127.0.0.1", "--port", port, "--reload"]


def start_fastapi(env: str = "dev"):
    """Start FastAPI server"""
    cmd = build_command(env)

    print(f"🚀 Starting store API ({env} mode)...")
    print(f"Command: {' '.join(cmd)}")

    process = subprocess.Popen(cmd)

    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n🛑 Shutting down...")
        process.terminate()
        process.wait()


if __name__ == "__main__":
    env = sys.argv[1] if len(sys.argv) > 1 else "dev"
    if env not in ("dev", "prod"):
        print(f"Unknown mode '{env}', expected dev or prod")
        sys.exit(1)
    start_fastapi(env)
