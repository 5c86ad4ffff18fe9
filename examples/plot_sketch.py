"""Example script that renders a sketch on the server and starts a plot."""
from __future__ import annotations

import argparse

import requests


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--server", default="http://localhost:8000")
    parser.add_argument("--sketch", default="inset-square")
    parser.add_argument("--mode", default="ordered", choices=["ordered", "flatten", "pause-between"])
    parser.add_argument("--plot", action="store_true", help="connect and start plotting")
    args = parser.parse_args()

    res = requests.post(f"{args.server}/api/render", json={"sketch": args.sketch}, timeout=10)
    res.raise_for_status()
    res = requests.post(f"{args.server}/api/plan", json={"mode": args.mode}, timeout=10)
    res.raise_for_status()
    summary = res.json()
    print(f"{summary['sketch']}: {summary['stats']}")
    print(f"{summary['packet_count']} packets, ~{summary['estimated_duration_ms'] / 1000:.1f} s")

    if args.plot:
        for step in ("connect", "start"):
            res = requests.post(f"{args.server}/api/plotter/{step}", timeout=30)
            res.raise_for_status()
            print(step, res.json())


if __name__ == "__main__":
    main()
