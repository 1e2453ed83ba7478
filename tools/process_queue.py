# tools/process_queue.py
from __future__ import annotations
import argparse, json, logging

from interview_core import config
from interview_core.llm_bridge import Evaluator
from interview_core.queue_worker import QueueProcessor
from api.storage import FileStore


def main(argv: list[str] | None = None, *, evaluator: Evaluator | None = None) -> int:
    ap = argparse.ArgumentParser(description="Drain one batch of pending written-answer evaluations.")
    ap.add_argument("--limit", type=int, default=config.QUEUE_BATCH_LIMIT, help="max jobs per run")
    ap.add_argument("--data-dir", default=None, help="store root (defaults to DATA_DIR)")
    ap.add_argument("--requeue-errors", action="store_true",
                    help="move errored jobs back to pending before processing")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    store = FileStore(args.data_dir)
    summary: dict[str, int] = {}
    if args.requeue_errors:
        summary["requeued"] = store.requeue_errors()
    summary.update(QueueProcessor(store, evaluator or Evaluator()).run_once(args.limit))
    print(json.dumps(summary, sort_keys=True))
    return 1 if summary.get("error") else 0


if __name__ == "__main__":
    raise SystemExit(main())
