from __future__ import annotations

import sys

from order_core.adapters.inbound.cli import run_cli
from order_core.bootstrap import build_calculate_cart
from order_core.config import Settings
from order_core.utils.logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    argv = argv or sys.argv[1:]
    if not argv:
        print("usage: order-core '<json>'")
        return 2

    settings = Settings.from_env()
    configure_logging(settings)
    svc = build_calculate_cart(settings)
    return run_cli(svc, argv[0])


def serve() -> None:
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings)
    uvicorn.run(
        "order_core.asgi:create_asgi_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    raise SystemExit(main())
