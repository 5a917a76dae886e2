"""
Run the autopilot against a live chat application.

Attach to an app started with --remote-debugging-port:
    python -m chat_autopilot --cdp-url http://localhost:9222 --match-url workbench

Or launch a local Chromium profile:
    python -m chat_autopilot --url https://chat.example.com --user-data-dir ~/.chat-autopilot
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from chat_autopilot.agent.service import Autopilot
from chat_autopilot.browser.session import BrowserSession
from chat_autopilot.config import AutopilotSettings
from chat_autopilot.dom.service import PlaywrightDomDocument
from chat_autopilot.exceptions import AutopilotError, BrowserConnectionError
from chat_autopilot.logging_config import setup_logging

logger = logging.getLogger('chat_autopilot.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='chat_autopilot', description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    target = parser.add_mutually_exclusive_group()
    target.add_argument('--cdp-url', help='Remote debugging endpoint of a running Chromium/Electron app')
    target.add_argument('--url', help='Start URL when launching a local Chromium')
    parser.add_argument('--match-url', help='Attach to the first page whose URL contains this text')
    parser.add_argument('--user-data-dir', help='Chromium profile directory for local launches')
    parser.add_argument('--headless', action='store_true', help='Launch the local Chromium headless')
    parser.add_argument('--interval', type=float, help='Seconds between checks (default 2)')
    parser.add_argument('--verification-timeout', type=float, help='Seconds to wait before re-checking a recovered error (default 5)')
    parser.add_argument('--fallback-text', help='Phrase typed by the backup plan')
    parser.add_argument('--same-window-links', action='store_true', help='Open links in the current window instead of a new one')
    parser.add_argument('--log-level', choices=['debug', 'info', 'result'], help='Override AUTOPILOT_LOGGING_LEVEL')
    return parser


async def run(args: argparse.Namespace) -> int:
    settings = AutopilotSettings.from_env(
        check_interval_seconds=args.interval,
        verification_timeout_seconds=args.verification_timeout,
        fallback_text=args.fallback_text,
    )
    session = BrowserSession(
        cdp_url=args.cdp_url,
        start_url=args.url,
        page_url_contains=args.match_url,
        user_data_dir=args.user_data_dir,
        headless=args.headless,
        same_window_links=args.same_window_links,
    )
    try:
        page = await session.start()
    except BrowserConnectionError as e:
        logger.error(f'❌ {e}')
        return 1

    autopilot = Autopilot(PlaywrightDomDocument(page), settings)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, autopilot.stop)
        except NotImplementedError:
            # Windows event loops: Ctrl+C surfaces as KeyboardInterrupt instead
            pass

    autopilot.start()
    try:
        await autopilot.wait_stopped()
    finally:
        if autopilot.is_running:
            autopilot.stop()
        await session.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        setup_logging(log_level=args.log_level, force_setup=True)
    try:
        return asyncio.run(run(args))
    except AutopilotError as e:
        logger.error(f'❌ {e}')
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == '__main__':
    sys.exit(main())
