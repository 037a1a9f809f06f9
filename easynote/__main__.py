#!/usr/bin/env python3
"""
EasyNote AI command line.

Processes one text with the configured chat-completion endpoint and prints
the reply.

Usage:
    python -m easynote "你好世界" --task translate
    echo "some text" | python -m easynote - --task summarize
"""
import argparse
import sys
import uuid
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import List, Optional

from easynote import provider
from easynote.exceptions import AIException, NotInitializedError
from easynote.llm.client import TransportGateway
from easynote.llm.prompts import TaskKind
from easynote.logging import get_logger, log_execution_time, set_level

logger = get_logger("ai-cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_CONFIGURED = 2

SERVICE_LOGGERS = (
    "ai-cli",
    "ai-provider",
    "ai-orchestrator",
    "ai-delay-queue",
    "ai-gateway",
    "ai-dispatcher",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="EasyNote AI text processor")
    parser.add_argument(
        "text",
        help="Text to process, or '-' to read it from stdin"
    )
    parser.add_argument(
        "--task",
        default=TaskKind.TRANSLATE.value,
        choices=[kind.value for kind in TaskKind],
        help="Kind of processing (default: translate)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the outcome (default: no limit)"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL for this run (e.g. DEBUG)"
    )
    return parser


@log_execution_time(logger)
def _run(text: str, task_kind: TaskKind, timeout: Optional[float]) -> str:
    return provider.get_provider().run(text, task_kind, timeout=timeout)


def main(argv: Optional[List[str]] = None, gateway: Optional[TransportGateway] = None) -> int:
    """
    Run the CLI.

    Args:
        argv: Arguments (sys.argv[1:] when None)
        gateway: Optional transport gateway, mainly for tests

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    if args.log_level:
        set_level(args.log_level, *SERVICE_LOGGERS)

    text = sys.stdin.read() if args.text == "-" else args.text
    session_id = str(uuid.uuid4())[:8]

    try:
        provider.init(gateway=gateway)
    except NotInitializedError as e:
        logger.error(e.message)
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return EXIT_NOT_CONFIGURED
    except ValueError as e:
        # Non-numeric or negative retry and timeout settings
        logger.error(f"Invalid configuration: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_NOT_CONFIGURED

    logger.info(
        "Processing text",
        extra={"session_id": session_id, "task_kind": args.task, "chars": len(text)}
    )

    try:
        reply = _run(text, TaskKind(args.task), args.timeout)
    except AIException as e:
        print(f"Failed: {e.message}", file=sys.stderr)
        return EXIT_FAILED
    except FutureTimeoutError:
        print(f"Failed: no result within {args.timeout}s", file=sys.stderr)
        return EXIT_FAILED
    except KeyboardInterrupt:
        logger.info("Interrupted by user", extra={"session_id": session_id})
        return EXIT_FAILED
    finally:
        provider.destroy()

    print(reply)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
