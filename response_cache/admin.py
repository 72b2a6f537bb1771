"""
Inspect and maintain cached responses from the command line.

    response-cache-admin keys
    response-cache-admin ttl "GET:/cached"
    response-cache-admin delete "GET:/cached"
    response-cache-admin flush

Commands run against the Redis server; the memory engine lives inside one
process and has nothing to inspect from outside. Namespace and Redis URL
default to the RESPONSE_CACHE_* settings.
"""

import argparse
import asyncio
import json
import math
import sys
from typing import Any, Dict, List, Optional

from shared.config import get_settings
from shared.logging import configure_logging
from .engines import RedisEngine
from .store import CacheStore


async def run_command(store: CacheStore, command: str, key: Optional[str] = None) -> Dict[str, Any]:
    """Execute one admin command against ``store`` and return a summary."""
    if command == "keys":
        keys = sorted(await store.keys())
        return {"namespace": store.namespace, "count": len(keys), "keys": keys}

    if command == "ttl":
        remaining = await store.ttl(key)
        persistent = remaining is not None and math.isinf(remaining)
        return {
            "namespace": store.namespace,
            "key": key,
            "ttl_seconds": None if persistent else remaining,
            "persistent": persistent,
        }

    if command == "delete":
        await store.delete(key)
        return {"namespace": store.namespace, "key": key, "deleted": True}

    if command == "flush":
        await store.flush()
        return {"namespace": store.namespace, "flushed": True}

    raise ValueError(f"Unknown command: {command}")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Inspect and maintain cached responses.")
    parser.add_argument("--redis-url", default=settings.redis_url, help="Redis connection URL")
    parser.add_argument("--namespace", default=settings.namespace, help="Cache namespace")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("keys", help="List cached keys")
    ttl_parser = subparsers.add_parser("ttl", help="Show seconds left for a key")
    ttl_parser.add_argument("key")
    delete_parser = subparsers.add_parser("delete", help="Remove one cached key")
    delete_parser.add_argument("key")
    subparsers.add_parser("flush", help="Remove every key in the namespace")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> Dict[str, Any]:
    settings = get_settings(redis_url=args.redis_url, namespace=args.namespace)
    engine = RedisEngine(settings.redis_url)
    store = CacheStore(engine, settings.namespace, settings.default_ttl_seconds)
    try:
        return await run_command(store, args.command, getattr(args, "key", None))
    finally:
        await engine.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging("response_cache", "warning")
    try:
        summary = asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130
    except Exception as exc:
        print(f"[cache-admin] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2, allow_nan=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
