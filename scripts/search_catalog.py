#!/usr/bin/env python3
"""
Search the BI dashboard catalog from a terminal:
- sign in with the configured BI credentials
- load every page of the view catalog
- print the matches for a query (same rules and limit as the Slack bot)

Use --render to also fetch the first match as a PNG into the current directory.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dashbot.bot.runtime import create_bi_client
from dashbot.catalog import CatalogLoader, SessionManager, ViewRenderer, search
from dashbot.error_handler import DashbotError
from dashbot.utils.config_loader import load_bot_config


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


async def run(cfg, query: str, limit: int, render: bool) -> int:
    client = create_bi_client(cfg)
    try:
        sessions = SessionManager(client)
        session = await sessions.authenticate(cfg.bi.login, cfg.bi.password)
        catalog = await CatalogLoader(client, page_size=cfg.bi.page_size).load_all(session)
        print(f"Catalog: {len(catalog)} views\n")

        result = search(catalog, query, limit)
        if not result.matches:
            print("No dashboards matched.")
            return 1
        for i, entry in enumerate(result.matches, start=1):
            print(f"[{i}] {entry.display_name}")
            print(f"    render_key={entry.render_key} id={entry.id}")
        if result.truncated:
            print(f"\n(limited to {limit} results; more may exist, refine the query)")

        if render:
            first = result.matches[0]
            image = await ViewRenderer(client).render(session, first.render_key)
            out = Path(f"{first.render_key.replace('/', '_')}.png")
            out.write_bytes(image.getvalue())
            print(f"\nSaved {out} ({out.stat().st_size} bytes)")
        return 0
    except DashbotError as e:
        print(f"[{type(e).__name__}] {e}", file=sys.stderr)
        return 2
    finally:
        await client.aclose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Search the BI dashboard catalog.")
    parser.add_argument("query", nargs="+", help="Words to look for in dashboard names")
    parser.add_argument("--limit", type=int, default=None, help="Max results (default: search_limit from config)")
    parser.add_argument("--render", action="store_true", help="Download the first match as PNG")
    parser.add_argument("--config", type=Path, default=None, help="Path to bot_config.yml")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(args.verbose)
    cfg = load_bot_config(args.config)
    limit = args.limit or cfg.search_limit
    return asyncio.run(run(cfg, " ".join(args.query), limit, args.render))


if __name__ == "__main__":
    sys.exit(main())
