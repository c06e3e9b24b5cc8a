"""
Worker management utilities.

The workers only run maintenance jobs (expired session purge, stale
invitation expiry), scheduled by beat.
"""

import subprocess
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

CELERY_APP = "app.core.celery_app"


def _run(*args: str) -> None:
    cmd = ["celery", "-A", CELERY_APP, *args]
    print(f"Running: {' '.join(cmd)}")
    subprocess.run(cmd)


def start_worker(concurrency: int = 2, queues: str = "default,maintenance"):
    _run("worker", "--loglevel=info", f"--concurrency={concurrency}", f"--queues={queues}")


def start_beat():
    _run("beat", "--loglevel=info")


def run_now(task: str):
    """Queue a maintenance task immediately instead of waiting for beat."""
    from app.core.celery_app import celery_app

    result = celery_app.send_task(task, queue="maintenance")
    print(f"Queued {task}: {result.id}")


def purge_queue(queue: str = "maintenance"):
    _run("purge", "-Q", queue, "-f")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Manage Celery workers")
    parser.add_argument("command", choices=["worker", "beat", "run", "purge"])
    parser.add_argument("--concurrency", type=int, default=2)
    parser.add_argument("--queues", default="default,maintenance")
    parser.add_argument(
        "--task",
        default="purge_expired_sessions",
        choices=["purge_expired_sessions", "expire_stale_invitations"],
    )
    parser.add_argument("--queue", default="maintenance", help="Queue to purge")

    args = parser.parse_args()

    if args.command == "worker":
        start_worker(args.concurrency, args.queues)
    elif args.command == "beat":
        start_beat()
    elif args.command == "run":
        run_now(args.task)
    elif args.command == "purge":
        purge_queue(args.queue)
