#!/usr/bin/env python3
"""
SMARTA Slack - Main Entry Point

Polls MARTA for boarding trains and posts them to a Slack webhook, and
serves the /find-arrival slash command.

Usage:
    python -m src.smarta.main [OPTIONS]

Options:
    --debug                Verbose logging
    --dry-run              Log notifications instead of posting them
    --no-server            Run the poll loop only (no HTTP endpoint)
    --poll-time SECONDS    Override POLL_TIME_IN_SECONDS

Environment Variables:
    MARTA_API_KEY               MARTA developer API key
    WEBHOOK_URL                 Slack incoming webhook URL
    POLL_TIME_IN_SECONDS        Seconds between polls
    SLACK_SIGNING_SECRET        Slack app signing secret
    SKIP_SIGNATURE_VERIFICATION Accept unsigned commands (local debugging only)

Example:
    # Run poller and command endpoint
    python -m src.smarta.main

    # Poll only, log instead of posting
    python -m src.smarta.main --no-server --dry-run
"""

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

import uvicorn
from pydantic import ValidationError

from src.smarta.command import CommandHandler
from src.smarta.notifier import get_notifier
from src.smarta.providers.base import TrainFeed
from src.smarta.providers.marta import MartaClient
from src.smarta.scheduler import PollScheduler
from src.smarta.server import create_app
from src.smarta.suppression import BoardingSuppressor
from src.smarta.verifier import SlackVerifier
from src.utils.config import Settings, get_settings
from src.utils.logger import get_logger, setup_logger

logger = get_logger()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="smarta-slack",
        description="Relay MARTA boarding trains to Slack",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument("--dry-run", action="store_true", help="Log notifications instead of posting them")
    parser.add_argument("--no-server", action="store_true", help="Run the poll loop only")
    parser.add_argument("--poll-time", type=int, default=None, metavar="SECONDS",
                        help="Override POLL_TIME_IN_SECONDS")
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with CLI flags applied on top of the environment."""
    updates = {}
    if args.debug:
        updates["debug_mode"] = True
    if args.dry_run:
        updates["dry_run"] = True
    if args.poll_time is not None:
        if args.poll_time < 1:
            raise ValueError("--poll-time must be at least 1 second")
        updates["poll_time_in_seconds"] = args.poll_time
    return settings.model_copy(update=updates)


def build_scheduler(settings: Settings, feed: TrainFeed) -> PollScheduler:
    """Create the poll scheduler from settings."""
    return PollScheduler(
        feed=feed,
        notifier=get_notifier(dry_run=settings.dry_run, timeout=settings.http_timeout_seconds),
        webhook_url=settings.webhook_url,
        poll_interval=settings.poll_time_in_seconds,
        suppressor=BoardingSuppressor(window_seconds=settings.boarding_suppression_seconds),
    )


def build_command_handler(settings: Settings, feed: TrainFeed) -> CommandHandler:
    """Create the slash command handler from settings."""
    verifier = None
    if not settings.skip_signature_verification:
        verifier = SlackVerifier(
            secret=settings.slack_signing_secret,
            version=settings.slack_signature_version,
            max_age_seconds=settings.request_max_age_seconds,
        )
    return CommandHandler(
        feed=feed,
        verifier=verifier,
        skip_verification=settings.skip_signature_verification,
    )


async def run_poller_only(scheduler: PollScheduler):
    """Run the poll loop until SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, scheduler.cancel)
    logger.info("✅ Signal handlers registered (SIGTERM, SIGINT)")

    await scheduler.start()
    await scheduler.task
    await scheduler.stop()


async def run_with_server(settings: Settings, scheduler: PollScheduler, handler: CommandHandler):
    """
    Serve the command endpoint; the poll loop stops when the server does.

    uvicorn re-raises SIGINT after serve() returns, which cancels this
    task while scheduler.stop() is waiting. stop() still lets the
    in-flight cycle finish before the cancellation propagates.
    """
    app = create_app(handler, scheduler)
    config = uvicorn.Config(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.effective_log_level.lower(),
    )
    server = uvicorn.Server(config)

    await scheduler.start()
    try:
        await server.serve()
    finally:
        await scheduler.stop()


async def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = parse_args(argv)

    try:
        settings = apply_overrides(get_settings(), args)
    except (ValidationError, ValueError) as e:
        logger.error(f"❌ Invalid configuration: {e}")
        return 1

    setup_logger(settings)

    logger.info("=" * 70)
    logger.info("CONFIGURATION")
    logger.info("=" * 70)
    logger.info(f"MARTA API Key: {'✓ Configured' if settings.marta_api_key else '✗ Not configured'}")
    logger.info(f"Poll interval: {settings.poll_time_in_seconds}s")
    logger.info(f"DRY-RUN Mode: {settings.dry_run}")
    logger.info(f"Signature verification: {not settings.skip_signature_verification}")
    logger.info(f"Boarding suppression: {settings.boarding_suppression_seconds}s")
    logger.info("=" * 70)

    feed = MartaClient(
        api_key=settings.marta_api_key,
        api_url=settings.marta_api_url,
        timeout=settings.http_timeout_seconds,
    )

    try:
        scheduler = build_scheduler(settings, feed)
        handler = None if args.no_server else build_command_handler(settings, feed)
    except ValueError as e:
        logger.error(f"❌ Failed to create components: {e}")
        return 1

    try:
        if args.no_server:
            await run_poller_only(scheduler)
        else:
            await run_with_server(settings, scheduler, handler)
    except asyncio.CancelledError:
        logger.info("Interrupted")
    finally:
        scheduler.cancel()
        await feed.aclose()
        logger.info("Shutting down...")

    return 0


def run():
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    run()
