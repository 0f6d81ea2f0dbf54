# irchat.py
import argparse
import asyncio
import curses
import logging
import sys
from typing import List, Optional

from irchat_core.app_config import AppConfig, ConfigError
from irchat_core.client.irc_client_logic import IRCClient_Logic, apply_arg_overrides
from irchat_core.logging.chat_logger import APP_LOGGER_NAME, LOG_FORMAT

main_ui_logger = logging.getLogger("irchat.main_ui")


def setup_logging(config: AppConfig, headless: bool = False):
    """
    Configure the ``irchat`` logger namespace.

    File output is installed by ChatLogger once the client exists. Here we
    only set levels, and in headless mode add a stderr handler for warnings.
    Curses mode never writes log records to the terminal.
    """
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(config.log_level_int)
    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)

    if headless:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        console_handler.setLevel(logging.WARNING)
        app_logger.addHandler(console_handler)
    elif not config.logging.enabled:
        app_logger.addHandler(logging.NullHandler())
    # Keep records away from the root logger's lastResort stderr handler.
    app_logger.propagate = False


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="irchat - a multi-channel terminal IRC client")

    parser.add_argument("--config", default=None, help="Path to the INI configuration file.")
    parser.add_argument("--server", default=None, help="IRC server hostname. Overrides config.")
    parser.add_argument("--port", type=int, default=None, help="IRC server port. Overrides config.")
    parser.add_argument("--nick", default=None, help="IRC nickname. Overrides config.")
    parser.add_argument("--channel", action="append", default=None, help="Channel to join. Can be used multiple times.")
    parser.add_argument("--password", default=None, help="Server password. Overrides config.")
    parser.add_argument("--ssl", action=argparse.BooleanOptionalAction, default=None, help="Use SSL/TLS. Overrides config.")
    parser.add_argument("--headless", action="store_true", help="Run without the curses UI, reading lines from stdin.")
    parser.add_argument("--skip-setup", action="store_true", help="Connect with the stored configuration without the setup screens.")
    return parser.parse_args(argv)


def run_headless(args: argparse.Namespace, app_config: AppConfig):
    app_logger = logging.getLogger("irchat.main_app")
    client: Optional[IRCClient_Logic] = None

    async def _main():
        nonlocal client
        client = IRCClient_Logic(stdscr=None, args=args, config=app_config)
        await client.run_main_loop()

    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        app_logger.info("Keyboard interrupt received in headless mode.")
        if client:
            client.request_shutdown("KeyboardInterrupt in headless mode")
    app_logger.info("irchat headless mode shutdown complete.")


def run_curses(args: argparse.Namespace, app_config: AppConfig):
    def curses_wrapper_with_args(stdscr):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        client_instance: Optional[IRCClient_Logic] = None
        main_task: Optional[asyncio.Task] = None
        try:
            client_instance = IRCClient_Logic(stdscr=stdscr, args=args, config=app_config)
            main_task = loop.create_task(client_instance.run_main_loop())
            loop.run_until_complete(main_task)
        except KeyboardInterrupt:
            main_ui_logger.info("KeyboardInterrupt caught. Initiating graceful shutdown.")
            if client_instance:
                client_instance.request_shutdown("KeyboardInterrupt")
            if main_task and not main_task.done():
                try:
                    loop.run_until_complete(asyncio.wait_for(main_task, timeout=5.0))
                except asyncio.TimeoutError:
                    main_ui_logger.error("Timeout waiting for the client to shut down.")
        finally:
            if main_task and not main_task.done():
                main_task.cancel()
                try:
                    loop.run_until_complete(main_task)
                except asyncio.CancelledError:
                    main_ui_logger.info("Main task cancelled.")
            loop.close()
            main_ui_logger.debug("Event loop closed.")

    curses.wrapper(curses_wrapper_with_args)


def main():
    args = parse_arguments()
    app_config = AppConfig(args.config)
    setup_logging(app_config, headless=args.headless)
    app_logger = logging.getLogger("irchat.main_app")
    app_logger.info(f"Starting irchat (config: {app_config.CONFIG_FILE_PATH}, exists: {app_config.file_exists})")

    if args.headless or args.skip_setup:
        # No setup screens to correct a bad config, so refuse it up front.
        probe = AppConfig(args.config)
        apply_arg_overrides(probe, args)
        try:
            probe.ensure_valid()
        except ConfigError as e:
            print(f"Invalid configuration: {e}", file=sys.stderr)
            sys.exit(2)

    if args.headless:
        run_headless(args, app_config)
    else:
        run_curses(args, app_config)


if __name__ == "__main__":
    main()
