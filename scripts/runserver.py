"""Container/server entrypoint: uvicorn for a single worker, Gunicorn for more."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]


def build_command(workers: int, host: str, port: str) -> list[str]:
    if workers <= 1:
        return [sys.executable, "-m", "uvicorn", "taskist.main:app", "--host", host, "--port", port]
    return [
        "gunicorn",
        "taskist.main:app",
        "-k",
        "uvicorn.workers.UvicornWorker",
        "-w",
        str(workers),
        "-b",
        f"{host}:{port}",
    ]


def main() -> None:
    workers = int(os.environ.get("WORKERS", "1"))
    host = os.environ.get("HOST", "0.0.0.0")
    port = os.environ.get("PORT", "3001")

    command = build_command(workers, host, port)
    print(f"→ Starting {command[0] if workers > 1 else 'uvicorn'} on {host}:{port}")
    subprocess.run(command, check=True, cwd=str(ROOT_DIR), env=os.environ.copy())


if __name__ == "__main__":
    main()
