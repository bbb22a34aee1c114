from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


logger = logging.getLogger(__name__)


def _ensure_src_on_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src_path = repo_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_ensure_src_on_path()

from core.config import OrchestratorConfig, parse_backend_order
from orchestration import AdvocacyOrchestrator
from service import TASKS, dispatch_task


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run one advocacy task against the configured AI backends with automatic failover."
    )
    parser.add_argument(
        "task",
        nargs="?",
        choices=TASKS,
        default="questions",
        help="Task to run.",
    )
    parser.add_argument("--symptoms", type=str, default="", help="Symptoms to describe.")
    parser.add_argument("--appointment-type", type=str, default="", help="Appointment type (questions only).")
    parser.add_argument("--concerns", type=str, default="", help="Patient concerns.")
    parser.add_argument(
        "--note",
        type=Path,
        default=None,
        help="Medical note text file (analyze-note only).",
    )
    parser.add_argument(
        "--order",
        type=str,
        default=None,
        help="Comma-separated backend preference. Same effect as setting AI_PROVIDER_ORDER.",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Print the backend status report after the task.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level).",
    )
    return parser


def main() -> int:
    args = build_parser().parse_args()
    setup_logging(verbose=args.verbose)

    config = OrchestratorConfig(
        backend_order=parse_backend_order(args.order) if args.order is not None else None,
    )
    orchestrator = AdvocacyOrchestrator(config=config)

    note_text = ""
    if args.task == "analyze-note":
        if args.note is None:
            logger.error("--note is required for analyze-note")
            return 2
        note_text = args.note.read_text(encoding="utf-8")
        logger.info(f"Read note from: {args.note} ({len(note_text)} chars)")

    context = {
        "symptoms": args.symptoms,
        "appointmentType": args.appointment_type,
        "concerns": args.concerns,
    }
    logger.info(f"Running task '{args.task}'...")
    status_code, body = dispatch_task(orchestrator, args.task, context=context, prompt=note_text)
    logger.info(f"Task finished with status {status_code}")
    print(json.dumps(body, indent=2, ensure_ascii=False))

    if args.status:
        print(json.dumps(orchestrator.status_report(), indent=2))
    return 0 if status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
