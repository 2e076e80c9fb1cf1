#!/usr/bin/env python
"""
Start the Trade Pricing API with uvicorn.

Usage:
    python scripts/run_api.py [--port 8000] [--data-dir PATH] [--no-reload]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the Trade Pricing API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--data-dir", help="Directory holding the pricing CSV exports")
    parser.add_argument("--no-reload", action="store_true")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    # Ensure src is in python path when running from a checkout
    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_path, env.get("PYTHONPATH")) if p)
    if args.data_dir:
        env["TRADE_PRICING_DATA_DIR"] = str(Path(args.data_dir).resolve())

    command = [
        sys.executable, "-m", "uvicorn",
        "trade_pricing.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if not args.no_reload:
        command.append("--reload")

    print(f"Starting Trade Pricing API on {args.host}:{args.port}...")
    try:
        subprocess.run(command, env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
