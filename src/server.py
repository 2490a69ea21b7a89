"""Protean Engine runner for the marketplace domain.

Starts the Engine workers that process events asynchronously:
- OutboxProcessor: polls the outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes event handlers
  (customer and tenant notifications)

Usage:
    PROTEAN_ENV=production python src/server.py
"""

import argparse
import asyncio

from protean.server.engine import Engine


def _get_domain():
    """Import and initialize the marketplace domain."""
    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


async def run():
    engine = Engine(_get_domain())
    await engine.run()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Marketstream Engine runner")
    parser.parse_args(argv)

    asyncio.run(run())


if __name__ == "__main__":
    main()
