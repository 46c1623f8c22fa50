#!/usr/bin/env python3
"""Watch shared locations from the command line.

Opens a session against the backend, prints the snapshot, then prints
every live update together with the recomputed map viewport. Optionally
shares a fixed position first and prints the resulting link.

Usage
-----
::

    export LOCSHARE_BASE_URL="http://localhost:5000"
    python scripts/watch_locations.py

Options::

    --page-url URL       Page address; add ?locationId=<id> for a single location
    --share NAME         Share a position under NAME before watching
    --lat / --lng        Coordinates used by --share
    --duration SECONDS   Stop after SECONDS (default: run until Ctrl-C)
    --json               Print records as JSON lines
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from locshare import LocationShareClient, LocshareConfig, StaticPositionProvider, StoreChange, Viewport
from locshare.render import describe


def _section(title: str) -> str:
    return f"\n{'=' * 60}\n  {title}\n{'=' * 60}"


async def main() -> None:
    parser = argparse.ArgumentParser(description="Watch shared locations and optionally share one.")
    parser.add_argument("--base-url", help="Backend base address (default: LOCSHARE_BASE_URL)")
    parser.add_argument("--page-url", help="Page address (default: LOCSHARE_PAGE_URL)")
    parser.add_argument("--share", metavar="NAME", help="Share a position under NAME before watching")
    parser.add_argument("--lat", type=float, default=51.505, help="Latitude used by --share")
    parser.add_argument("--lng", type=float, default=-0.09, help="Longitude used by --share")
    parser.add_argument("--duration", type=float, default=None, help="Stop after this many seconds")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Print records as JSON lines")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, str] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.page_url:
        overrides["page_url"] = args.page_url
    config = LocshareConfig.from_env(**overrides)

    provider = StaticPositionProvider(args.lat, args.lng) if args.share else None

    async with LocationShareClient(config, position_provider=provider) as client:
        print(_section(f"locshare watch ({client.mode} mode)"))

        def _on_change(change: StoreChange) -> None:
            record = change.record
            if record is None:
                return
            if args.json_mode:
                print(json.dumps(record.model_dump(mode="json", by_alias=False), ensure_ascii=False))
            else:
                print(f"  [{change.source}/{change.kind}] {describe(record)}")

        def _on_viewport(viewport: Viewport) -> None:
            if not args.json_mode:
                print(f"  viewport -> center={viewport.center} zoom={viewport.zoom}")

        await client.start()
        if client.error:
            print(f"  error: {client.error}")
        for record in client.locations:
            print(f"  {describe(record)}")

        client.store.subscribe(_on_change)
        client.viewport_controller.subscribe(_on_viewport)

        if args.share:
            link = await client.share(args.share)
            if link is not None:
                print(_section("SHARED"))
                print(f"  {link.url}")
            else:
                print(f"  share failed: {client.error}")

        print(_section("LIVE UPDATES (Ctrl-C to stop)"))
        try:
            if args.duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(args.duration)
        finally:
            if client.error:
                print(f"  last error: {client.error}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
