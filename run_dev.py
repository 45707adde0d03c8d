#!/usr/bin/env python3
"""
Development runner script for PromptLab.
Starts the API server with auto-reload.
"""

import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent

sys.path.insert(0, str(PROJECT_ROOT))
load_dotenv()

from config.settings import get_settings


def run_api(host: str, port: int):
    """Start the FastAPI backend server."""
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "promptlab.api.main:app", "--reload", "--host", host, "--port", str(port)],
        cwd=PROJECT_ROOT,
    )


def main():
    settings = get_settings()
    port = settings.port

    print(f"""
╔════════════════════════════════════════════════════════════════════════╗
║   PromptLab Development Server
╠════════════════════════════════════════════════════════════════════════╣
║   API Server:    http://localhost:{port}
║   API Docs:      http://localhost:{port}/docs
║   Press Ctrl+C to stop
╚════════════════════════════════════════════════════════════════════════╝
    """)

    api_proc = run_api(settings.api_host, port)
    try:
        api_proc.wait()
    except KeyboardInterrupt:
        print("\nShutting down...")
        api_proc.terminate()
        try:
            api_proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            api_proc.kill()
        sys.exit(0)


if __name__ == "__main__":
    main()
