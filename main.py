"""Mythic Realms: dev launcher. Starts the backend API in watch mode."""

import argparse
import os
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = os.getenv("PORT", "13013")


def main():
    parser = argparse.ArgumentParser(description="Mythic Realms dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Save and config directory (default: ./data)")
    parser.add_argument("--no-reload", action="store_true",
                        help="Run without watching for code changes")
    args = parser.parse_args()

    # Build env for the subprocess so the backend picks up the same data dir
    env = os.environ.copy()
    if args.data_dir:
        args.data_dir.mkdir(parents=True, exist_ok=True)
        env["DATA_DIR"] = str(args.data_dir.resolve())

    cmd = [sys.executable, "-m", "uvicorn", "backend.app:app", "--host", HOST, "--port", PORT]
    if not args.no_reload:
        cmd.append("--reload")

    print(f"Starting backend on http://localhost:{PORT} ...")
    try:
        subprocess.run(cmd, cwd=ROOT, env=env, check=False)
    except KeyboardInterrupt:
        print("\nShutting down...")


if __name__ == "__main__":
    main()
