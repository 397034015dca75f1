#!/usr/bin/env python3
"""
Catalog Crawler Server
Starts the FastAPI backend with uvicorn and keeps it running until Ctrl+C.
"""

import socket
import subprocess
import sys
import time
from pathlib import Path

BACKEND_DIR = Path(__file__).parent / 'backend'
sys.path.insert(0, str(BACKEND_DIR))

from api.config import settings  # noqa: E402

backend_process = None


def check_backend_running():
    """Check if backend is already running"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    result = sock.connect_ex(('localhost', settings.api_port))
    sock.close()
    return result == 0


def backend_command(reload=False):
    """uvicorn command line for the configured host and port"""
    command = [
        sys.executable, '-m', 'uvicorn', 'api.main:app',
        '--host', settings.api_host,
        '--port', str(settings.api_port),
    ]
    if reload or settings.api_debug:
        command.append('--reload')
    return command


def start_backend(reload=False):
    """Start the FastAPI backend"""
    global backend_process

    print("Starting backend server...")
    backend_process = subprocess.Popen(backend_command(reload), cwd=str(BACKEND_DIR))

    # Wait for server to start
    print("Waiting for backend to start...")
    for _ in range(30):
        if backend_process.poll() is not None:
            break
        if check_backend_running():
            print("✅ Backend started successfully!")
            return backend_process
        time.sleep(0.5)

    print("❌ Backend failed to start")
    stop_backend()
    return None


def stop_backend():
    """Stop the backend process"""
    global backend_process

    if backend_process:
        print("🔄 Stopping backend...")
        backend_process.terminate()
        try:
            backend_process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            backend_process.kill()
        backend_process = None


def main():
    print("=" * 50)
    print("  Catalog Crawler - Server")
    print("=" * 50)
    print()

    if check_backend_running():
        print(f"✅ Backend already running on http://localhost:{settings.api_port}")
        return

    if not start_backend(reload='--reload' in sys.argv[1:]):
        print("\nFailed to start backend. Please check logs.")
        sys.exit(1)

    print()
    print(f"  Backend API: http://localhost:{settings.api_port}")
    print(f"  API Docs:    http://localhost:{settings.api_port}/docs")
    print()
    print("  Press Ctrl+C to stop")
    print("=" * 50)

    try:
        while backend_process and backend_process.poll() is None:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n\nShutting down...")
    finally:
        stop_backend()
        print("✅ Server stopped")


if __name__ == '__main__':
    main()
