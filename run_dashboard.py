"""
Polymarket dashboard - synchronous entrypoint.

Wraps the async main() from main_dashboard.py so it can be run via
`python run_dashboard.py [--repl]` or the `polymarket-dashboard` script.
"""

import asyncio
import signal
import sys

from main_dashboard import main as dashboard_main


def _setup_signal_handlers(loop: asyncio.AbstractEventLoop, task: asyncio.Task) -> None:
    """Attach SIGTERM handler for clean shutdown. SIGINT is a key in raw mode."""
    if sys.platform == 'win32':
        return

    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, AttributeError, RuntimeError):
        pass


def main() -> None:
    """Synchronous entrypoint that runs the async dashboard main()."""
    repl = "--repl" in sys.argv[1:]

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    task = loop.create_task(dashboard_main(repl=repl))
    _setup_signal_handlers(loop, task)

    status = 0
    try:
        status = loop.run_until_complete(task)
    except (KeyboardInterrupt, asyncio.CancelledError):
        # Allow Ctrl+C / SIGTERM without ugly traceback
        print("Dashboard interrupted.")
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
    sys.exit(status)


if __name__ == "__main__":
    main()
