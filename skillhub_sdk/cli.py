"""CLI commands for browsing SkillHub."""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import get_args

from .agents import DEFAULT_AGENTS, SUPPORTED_AGENTS
from .client import SkillHubClient
from .errors import SkillHubError
from .models import CatalogQuery, CatalogSort, CatalogStatus, SearchMethod, SearchRequest, SortOrder


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skillhub",
        description="Search and browse skills on SkillHub",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="API base URL (default: $SKILLHUB_BASE_URL or https://skillhub.club/api/v1)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="API token (default: $SKILLHUB_TOKEN)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: $SKILLHUB_TIMEOUT or 30)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log requests to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # search subcommand
    search_parser = subparsers.add_parser("search", help="Search skills with a natural-language query")
    search_parser.add_argument("query", help="Search text (e.g., 'pdf processing')")
    search_parser.add_argument("--limit", type=int, default=None, help="Maximum results")
    search_parser.add_argument(
        "--method",
        choices=get_args(SearchMethod),
        default=None,
        help="Search method (default: server choice)",
    )
    search_parser.add_argument("--category", default=None, help="Restrict to a category")
    search_parser.add_argument("--min-score", type=float, default=None, help="Minimum skill score")
    search_parser.add_argument(
        "--meta",
        action="store_true",
        help="Print the full response including search metadata",
    )

    # catalog subcommand
    catalog_parser = subparsers.add_parser("catalog", help="Browse the skill catalog")
    catalog_parser.add_argument("--category", default=None, help="Filter by category")
    catalog_parser.add_argument(
        "--tag",
        action="append",
        default=[],
        dest="tags",
        help="Filter by tag (repeatable)",
    )
    catalog_parser.add_argument("--min-score", type=float, default=None, help="Minimum skill score")
    catalog_parser.add_argument("--min-stars", type=int, default=None, help="Minimum GitHub stars")
    catalog_parser.add_argument("--status", choices=get_args(CatalogStatus), default=None)
    catalog_parser.add_argument("--sort", choices=get_args(CatalogSort), default=None)
    catalog_parser.add_argument("--order", choices=get_args(SortOrder), default=None)
    catalog_parser.add_argument("--limit", type=int, default=None)
    catalog_parser.add_argument("--offset", type=int, default=None)
    catalog_parser.add_argument("--include-content", action="store_true", help="Include SKILL.md text")
    catalog_parser.add_argument("--include-evaluation", action="store_true", help="Include evaluations")

    # popular / recent subcommands
    for name, help_text in (("popular", "List top-scoring skills"), ("recent", "List recently added skills")):
        listing_parser = subparsers.add_parser(name, help=help_text)
        listing_parser.add_argument("--limit", type=int, default=10, help="Number of skills (default: 10)")

    subparsers.add_parser("categories", help="List categories with skill counts")

    # show subcommand
    show_parser = subparsers.add_parser("show", help="Show details for a skill")
    show_parser.add_argument("skill", help="Skill id or slug")
    show_parser.add_argument("--include-content", action="store_true", help="Include SKILL.md text")

    # install subcommand
    install_parser = subparsers.add_parser("install", help="Show install instructions for a skill")
    install_parser.add_argument("skill", help="Skill id or slug")
    install_parser.add_argument(
        "--agent",
        action="append",
        default=[],
        dest="agents",
        choices=list(SUPPORTED_AGENTS),
        help="Target agent (repeatable, default: claude)",
    )
    install_parser.add_argument(
        "--script",
        choices=["bash", "powershell"],
        default=None,
        help="Print only the install script for this shell",
    )

    # content subcommand
    content_parser = subparsers.add_parser("content", help="Print the raw SKILL.md of a skill")
    content_parser.add_argument("skill", help="Skill id or slug")

    subparsers.add_parser("agents", help="List supported agents and their install paths")

    # user subcommands
    subparsers.add_parser("me", help="Show the authenticated user")
    subparsers.add_parser("favorites", help="List favorite skills")
    fav_add_parser = subparsers.add_parser("favorite-add", help="Add a skill to favorites")
    fav_add_parser.add_argument("skill_id", help="Skill id")
    fav_remove_parser = subparsers.add_parser("favorite-remove", help="Remove a skill from favorites")
    fav_remove_parser.add_argument("skill_id", help="Skill id")

    return parser


def _to_jsonable(value):
    if dataclasses.is_dataclass(value):
        return dataclasses.asdict(value)
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    return value


async def _run(args):
    overrides = {
        "base_url": args.base_url,
        "token": args.token,
        "timeout": args.timeout,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    async with SkillHubClient.from_settings(**overrides) as client:
        if args.command == "search":
            filters = {
                "limit": args.limit,
                "method": args.method,
                "category": args.category,
                "min_score": args.min_score,
            }
            if args.meta:
                return await client.search_with_meta(SearchRequest(query=args.query, **filters))
            return await client.search(args.query, **filters)
        if args.command == "catalog":
            query = CatalogQuery(
                category=args.category,
                tags=args.tags or None,
                min_score=args.min_score,
                min_stars=args.min_stars,
                status=args.status,
                sort=args.sort,
                order=args.order,
                limit=args.limit,
                offset=args.offset,
                include_content=args.include_content,
                include_evaluation=args.include_evaluation,
            )
            return await client.get_catalog(query)
        if args.command == "popular":
            return await client.get_popular(args.limit)
        if args.command == "recent":
            return await client.get_recent(args.limit)
        if args.command == "categories":
            return await client.get_categories()
        if args.command == "show":
            return await client.get_skill(args.skill, include_content=args.include_content)
        if args.command == "install":
            info = await client.get_install_info(args.skill, args.agents or DEFAULT_AGENTS)
            if args.script:
                return getattr(info.scripts, args.script)
            return info
        if args.command == "content":
            return await client.get_skill_content(args.skill)
        if args.command == "me":
            return await client.get_current_user()
        if args.command == "favorites":
            return await client.get_favorites()
        if args.command == "favorite-add":
            await client.add_favorite(args.skill_id)
            return f"Added {args.skill_id} to favorites"
        if args.command == "favorite-remove":
            await client.remove_favorite(args.skill_id)
            return f"Removed {args.skill_id} from favorites"
    raise ValueError(f"Unhandled command: {args.command}")


def main():
    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(name)s] %(message)s",
        stream=sys.stderr,
    )
    if not args.verbose:
        logging.getLogger("httpx").setLevel(logging.ERROR)
        logging.getLogger("httpcore").setLevel(logging.ERROR)

    if args.command == "agents":
        json.dump([dataclasses.asdict(a) for a in SUPPORTED_AGENTS.values()], sys.stdout, indent=2)
        sys.stdout.write("\n")
        return

    try:
        result = asyncio.run(_run(args))
    except SkillHubError as e:
        code = f", code {e.code}" if e.code else ""
        print(f"error: {e.message} (status {e.status}{code})", file=sys.stderr)
        sys.exit(1)

    if isinstance(result, str):
        sys.stdout.write(result if result.endswith("\n") else f"{result}\n")
    else:
        json.dump(_to_jsonable(result), sys.stdout, indent=2)
        sys.stdout.write("\n")


if __name__ == "__main__":
    main()
