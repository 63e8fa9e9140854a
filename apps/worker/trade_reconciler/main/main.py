from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal

from apps.worker.trade_reconciler.wiring.modules import build_trade_reconciler_app
from tradebot.platform.config import resolve_tradebot_config_path


def _configure_logging() -> None:
    """
    Configure process-wide logging defaults for trade reconciler worker.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Logging is configured once at process start.
    Raises:
        None.
    Side Effects:
        Sets root logging handlers and format.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trade-reconciler")
    parser.add_argument("--config", default=None, help="Path to tradebot runtime config")
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Prometheus metrics HTTP port (CLI override has highest priority)",
    )
    return parser


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    """
    Install SIGTERM/SIGINT handlers that trigger cooperative shutdown.

    Args:
        stop_event: Shared shutdown event.
    Returns:
        None.
    Assumptions:
        Function runs inside active asyncio event loop.
    Raises:
        None.
    Side Effects:
        Registers process signal handlers.
    """
    loop = asyncio.get_running_loop()

    def _mark_stop() -> None:
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _mark_stop)
        except NotImplementedError:
            signal.signal(sig, lambda *_args: _mark_stop())


async def _run_async(config_path: str | None, metrics_port: int | None) -> int:
    if metrics_port is not None and metrics_port <= 0:
        raise ValueError("--metrics-port must be > 0 when provided")
    resolved_config_path = resolve_tradebot_config_path(
        environ=os.environ,
        cli_config_path=config_path,
    )
    stop_event = asyncio.Event()
    _install_signal_handlers(stop_event)
    app = build_trade_reconciler_app(
        config_path=resolved_config_path,
        environ=os.environ,
        metrics_port=metrics_port,
    )
    await app.run(stop_event)
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Entrypoint for trade reconciler worker process.

    Args:
        argv: Optional command-line arguments without program name.
    Returns:
        int: Process exit code.
    Assumptions:
        Function is executed in standalone process context.
    Raises:
        None.
    Side Effects:
        Initializes logging and runs asyncio loop.
    """
    _configure_logging()
    args = _build_parser().parse_args(argv)
    try:
        return asyncio.run(
            _run_async(
                config_path=args.config,
                metrics_port=args.metrics_port,
            )
        )
    except Exception:  # noqa: BLE001
        logging.getLogger(__name__).exception("trade-reconciler failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
