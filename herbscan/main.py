"""
Command line entry point.

    herbscan lookup '<scanned text>'   resolve pasted text
    herbscan scan [--timeout 30]       scan a QR code with the camera
    herbscan normalize '<text>'        print the canonical key only
"""

import argparse
import asyncio
import sys
from typing import Any, Callable, List, Optional

import structlog

from herbscan import __version__
from herbscan.core.config import ANDROID_EMULATOR, DEFAULT_PLATFORM, Settings, get_settings
from herbscan.core.logging_config import configure_logging
from herbscan.presentation.presenter import ResultPresenter
from herbscan.services.normalizer import normalize
from herbscan.services.resolution.interfaces import ErrorKind, LookupOutcome
from herbscan.services.resolution.manager import ResolutionClientFactory
from herbscan.workflows.scan_workflow import ScanWorkflow

logger = structlog.get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_NO_INPUT = 2

Sink = Callable[[str], Any]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="herbscan",
        description="Scan or paste a product code and look it up."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--base-url", help="Lookup service base URL (overrides the platform default)")
    parser.add_argument(
        "--platform",
        choices=[DEFAULT_PLATFORM, ANDROID_EMULATOR],
        help="Deployment target used to pick the default base URL"
    )
    parser.add_argument("--token", help="Bearer token attached to lookups")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING...")
    parser.add_argument("--json-logs", action="store_true", default=None, help="Emit JSON log lines")

    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup = subparsers.add_parser("lookup", help="Resolve pasted or typed text")
    lookup.add_argument("text", help="Scanned content: id, product URL or JSON")

    scan = subparsers.add_parser("scan", help="Scan a QR code with the camera")
    scan.add_argument("--timeout", type=float, default=None, help="Stop scanning after N seconds")
    scan.add_argument("--camera-index", type=int, default=None, help="OpenCV camera index")

    norm = subparsers.add_parser("normalize", help="Print the canonical key without looking it up")
    norm.add_argument("text")

    return parser


def build_settings(args: argparse.Namespace) -> Settings:
    """Command line values take precedence over the environment."""
    return get_settings(
        api_base_url=args.base_url,
        platform=args.platform,
        auth_token=args.token,
        log_level=args.log_level,
        log_json=args.json_logs,
        camera_index=getattr(args, "camera_index", None),
    )


def exit_code(outcome: Optional[LookupOutcome]) -> int:
    if outcome is None:
        return EXIT_NO_INPUT
    if outcome.is_success:
        return EXIT_SUCCESS
    if outcome.error_kind == ErrorKind.VALIDATION:
        return EXIT_NO_INPUT
    return EXIT_FAILURE


async def run_lookup(settings: Settings, text: str, sink: Sink = print) -> int:
    """Resolve manually entered text and render the outcome."""
    workflow = ScanWorkflow(ResolutionClientFactory.create_client(settings))
    ResultPresenter().attach(workflow.store, sink)
    try:
        outcome = await workflow.submit_text(text)
    finally:
        await workflow.close()
    return exit_code(outcome)


async def run_scan(settings: Settings, timeout: Optional[float] = None, sink: Sink = print) -> int:
    """Scan one code with the camera, resolve it and render the outcome."""
    # Camera stack is only needed for this command
    from herbscan.services.permission.camera_host import CameraPermissionHost
    from herbscan.services.permission.gate import PermissionGate
    from herbscan.services.scanner.opencv_source import OpenCVQrScanSource
    from herbscan.services.scanner.session import ScanSessionController

    controller = ScanSessionController(
        OpenCVQrScanSource(camera_index=settings.camera_index, frame_interval=settings.frame_interval),
        PermissionGate(CameraPermissionHost(settings.camera_index)),
        debounce_seconds=settings.debounce_seconds,
    )
    workflow = ScanWorkflow(ResolutionClientFactory.create_client(settings), controller)
    ResultPresenter().attach(workflow.store, sink)

    timer = None
    if timeout:
        timer = asyncio.get_running_loop().call_later(timeout, workflow.stop_scan)

    sink("Scanning... hold a QR code in front of the camera")
    try:
        outcome = await workflow.scan_and_resolve()
    finally:
        if timer is not None:
            timer.cancel()
        await workflow.close()

    if outcome is None:
        sink("Scan stopped, no code detected")
    return exit_code(outcome)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = build_settings(args)
    configure_logging(settings.log_level, settings.log_json)

    if args.command == "normalize":
        key = normalize(args.text)
        if not key:
            return EXIT_NO_INPUT
        print(key)
        return EXIT_SUCCESS

    if args.command == "lookup":
        return asyncio.run(run_lookup(settings, args.text))

    try:
        return asyncio.run(run_scan(settings, args.timeout))
    except KeyboardInterrupt:
        logger.info("Scan interrupted")
        return EXIT_NO_INPUT


if __name__ == "__main__":
    sys.exit(main())
