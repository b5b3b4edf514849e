"""CLI entry point — python -m trendscout."""

import argparse
import json
import sys

from .config import DEFAULT_AUDIENCE, DEFAULT_GEO, DEFAULT_NICHE, load_config, run_setup
from .log import set_verbose


def _trend_to_dict(trend) -> dict:
    return {
        "topic": trend.topic,
        "description": trend.description,
        "score": trend.score,
        "source": trend.source,
        "url": trend.url,
        "timestamp": trend.timestamp.isoformat(),
        "metadata": trend.metadata,
    }


def cmd_discover(args):
    from .trends import TrendAggregator, TrendContext

    config = load_config()
    if args.semantic:
        config = {**config, "semantic_dedup": True}

    overrides = {}
    if args.limit is not None:
        overrides["limit"] = args.limit
    aggregator = TrendAggregator.from_config(config, **overrides)

    context = TrendContext(
        niche=args.niche,
        audience=args.audience,
        geo=args.geo,
        topic=args.topic or None,
    )
    trends = aggregator.discover_trends(context)

    if args.json:
        print(json.dumps({"trends": [_trend_to_dict(t) for t in trends]}, indent=2, ensure_ascii=False))
        return trends

    if not trends:
        print("  No trends available right now from enabled providers.")
        sys.exit(1)

    subject = f"'{context.topic}'" if context.has_topic else f"{context.niche} / {context.audience} / {context.geo}"
    print(f"\n  Trending for {subject} ({len(trends)} found):\n")
    for i, trend in enumerate(trends, 1):
        print(f"  {i:2d}. [{trend.source}] {trend.topic} [{trend.score:.0f}]")
        if trend.description:
            print(f"      {trend.description[:100]}")
        if trend.url:
            print(f"      {trend.url}")
    return trends


def cmd_providers(args):
    from .trends import build_providers

    providers = build_providers(load_config())
    if not providers:
        print("  No providers enabled.")
        return

    print("\n  Trend providers:\n")
    for provider in providers:
        status = "ready" if provider.is_available else "missing key"
        print(f"  - {provider.name:<14} {status}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="trendscout — multi-provider trending topic discovery",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    # discover
    p_discover = sub.add_parser("discover", help="Discover trending topics")
    p_discover.add_argument("--topic", default=None, help="Free-text topic to search instead of the niche")
    p_discover.add_argument("--niche", default=DEFAULT_NICHE)
    p_discover.add_argument("--audience", default=DEFAULT_AUDIENCE)
    p_discover.add_argument("--geo", default=DEFAULT_GEO)
    p_discover.add_argument("--limit", type=int, default=None, help="Max trends to return")
    p_discover.add_argument("--semantic", action="store_true", help="Merge near-identical topics via embeddings")
    p_discover.add_argument("--json", action="store_true", help="Print JSON instead of a table")

    # providers
    sub.add_parser("providers", help="List configured providers")

    # setup
    sub.add_parser("setup", help="Configure provider API keys")

    args = parser.parse_args(argv)

    if args.verbose:
        set_verbose(True)

    if not args.cmd:
        parser.print_help()
        return

    if args.cmd == "discover":
        cmd_discover(args)
    elif args.cmd == "providers":
        cmd_providers(args)
    elif args.cmd == "setup":
        run_setup()


if __name__ == "__main__":
    main()
