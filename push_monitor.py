#!/usr/bin/env python3
"""Debug script to watch board updates on the push channel"""

import asyncio
import logging
import sys

from config import ConfigurationError, DesktopConfiguration
from core.data_models import BoardSnapshot, Cell, CellState
from core.event_subscriber import BoardEventSubscriber


def summarize(snapshot: BoardSnapshot) -> str:
    counts = {state: 0 for state in CellState}
    unknown = 0
    for row in snapshot.cells:
        for cell in row:
            if isinstance(cell, Cell):
                counts[cell.state] += 1
            else:
                unknown += 1
    parts = [f"{state.value}={count}" for state, count in counts.items()]
    if unknown:
        parts.append(f"unknown={unknown}")
    return (
        f"{snapshot.difficulty.value} {snapshot.row_count}x{snapshot.column_count} "
        f"{snapshot.progress.value} elapsed={snapshot.elapsed_seconds} " + " ".join(parts)
    )


async def monitor(config: DesktopConfiguration, duration: float) -> int:
    subscriber = BoardEventSubscriber(
        config.mqtt_host,
        config.mqtt_port,
        config.mqtt_topic,
        transport=config.mqtt_transport,
    )
    received = []

    def on_snapshot(snapshot: BoardSnapshot) -> None:
        received.append(snapshot)
        print(f"🔄 {summarize(snapshot)}")

    subscription = subscriber.subscribe(on_snapshot, asyncio.get_running_loop())
    print(f"=== Monitoring {config.mqtt_topic} on {config.mqtt_host}:{config.mqtt_port} for {duration:.0f}s ===")
    try:
        await asyncio.sleep(duration)
    finally:
        subscription.cancel()

    print(f"Subscription acknowledged: {subscription.resolved}")
    print(f"Updates received: {len(received)}, dropped: {subscriber.messages_dropped}")
    return 0


def main() -> int:
    logging.basicConfig(level=logging.DEBUG,
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')
    try:
        config = DesktopConfiguration.from_env()
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
        return 1
    duration = float(sys.argv[1]) if len(sys.argv) > 1 else 30.0
    return asyncio.run(monitor(config, duration))


if __name__ == "__main__":
    sys.exit(main())
