"""Command-line entry point for the Aura wardrobe client and gateway."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from typing import List, Optional

from aura_app.app import AuraSession
from aura_app.config import AuraConfig
from models.errors import WardrobeError


def _print(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _item_rows(items) -> List[dict]:
    return [
        {"id": item.id, "description": item.description, "category": item.category, "color": item.color}
        for item in items
    ]


async def _run(args: argparse.Namespace, config: AuraConfig) -> int:
    async with AuraSession(config) as session:
        workflows = session.workflows
        if args.command == "list":
            items = session.wardrobe.search(args.search or "", args.category, args.style)
            _print(_item_rows(items))
        elif args.command == "add":
            overrides = {"description": args.description, "color": args.color, "category": args.category}
            item = await workflows.add_item_from_file(args.image, **overrides)
            _print(_item_rows([item]))
        elif args.command == "delete":
            workflows.delete_item(args.item_id)
            _print(_item_rows(session.wardrobe.items))
        elif args.command == "ootd":
            view = await workflows.dashboard(args.weather, args.calendar, regenerate=args.regenerate)
            _print(
                {
                    "source": view.outfit_of_the_day.source,
                    "reasoning": view.outfit_of_the_day.reasoning,
                    "items": _item_rows(view.outfit_of_the_day.items),
                    "recently_added": _item_rows(view.recently_added),
                    "error": view.error,
                }
            )
        elif args.command == "style":
            result = await workflows.style_for_occasion(args.occasion, args.constraints or "")
            _print(
                {
                    "occasion": result.occasion,
                    "outfits": [
                        {**asdict(outfit), "items": _item_rows(result.items_for(outfit, session.wardrobe))}
                        for outfit in result.outfits
                    ],
                    "must_haves": result.must_haves,
                }
            )
        elif args.command == "rate":
            _print(asdict(await workflows.rate_outfit_file(args.image)))
        elif args.command == "chat":
            reply = await workflows.chat(args.message)
            print(reply.text)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aura", description="Aura wardrobe assistant")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve", help="run the wardrobe gateway")

    token = sub.add_parser("token", help="issue a bearer token for a user id")
    token.add_argument("user_id")

    listing = sub.add_parser("list", help="list wardrobe items")
    listing.add_argument("--search")
    listing.add_argument("--category")
    listing.add_argument("--style")

    add = sub.add_parser("add", help="analyze and save a clothing photo")
    add.add_argument("image")
    add.add_argument("--description")
    add.add_argument("--color")
    add.add_argument("--category")

    delete = sub.add_parser("delete", help="delete an item by id")
    delete.add_argument("item_id")

    ootd = sub.add_parser("ootd", help="show the outfit of the day")
    ootd.add_argument("--regenerate", action="store_true")
    ootd.add_argument("--weather", default="Sunny, 22°C")
    ootd.add_argument("--calendar", default="Team Lunch at Noon")

    style = sub.add_parser("style", help="get outfit ideas for an occasion")
    style.add_argument("occasion")
    style.add_argument("--constraints")

    rate = sub.add_parser("rate", help="critique an outfit photo")
    rate.add_argument("image")

    chat = sub.add_parser("chat", help="ask the stylist a question")
    chat.add_argument("message")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = AuraConfig.from_env()

    if args.command == "serve":
        from server.api import serve

        serve(config)
        return 0
    if args.command == "token":
        from server.auth import TokenVerifier

        if not config.auth_secret:
            print("AURA_AUTH_SECRET is not set", file=sys.stderr)
            return 2
        print(TokenVerifier(config.auth_secret).issue(args.user_id))
        return 0

    try:
        return asyncio.run(_run(args, config))
    except WardrobeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
