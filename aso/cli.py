"""ASO_Scores - Command line entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from aso.config import AppConfig
from aso.schemas import Strategy, SuggestOptions
from aso.service import AsoService
from aso.utils.exceptions import AsoError
from aso.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aso",
        description="Keyword difficulty, traffic and app visibility scores",
    )
    parser.add_argument("--store", choices=["itunes", "gplay"], default=None)
    parser.add_argument("--country", default=None, help="Store country code")
    sub = parser.add_subparsers(dest="command", required=True)

    scores = sub.add_parser("scores", help="Difficulty and traffic of a keyword")
    scores.add_argument("keyword")

    visibility = sub.add_parser("visibility", help="Visibility score of an app")
    visibility.add_argument("app_id")

    keywords = sub.add_parser("keywords", help="Ranked keywords of an app")
    keywords.add_argument("app_id")

    suggest = sub.add_parser("suggest", help="Suggest keywords from similar apps")
    suggest.add_argument(
        "seed", nargs="+", help="App id, or app ids / keywords for list strategies",
    )
    suggest.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=Strategy.CATEGORY.value,
    )
    suggest.add_argument("--num", type=int, default=None)
    suggest.add_argument("--exclude", nargs="*", default=[])
    return parser


async def run(args: argparse.Namespace, config: AppConfig) -> Any:
    async with AsoService.from_config(config) as service:
        if args.command == "scores":
            return await service.scores(args.keyword)
        if args.command == "visibility":
            return await service.visibility(args.app_id)
        if args.command == "keywords":
            return await service.app_keywords(args.app_id)

        strategy = Strategy(args.strategy)
        list_seed = strategy in (Strategy.ARBITRARY, Strategy.KEYWORDS, Strategy.SEARCH)
        seed = args.seed if list_seed else args.seed[0]
        options = SuggestOptions(
            num=args.num or config.suggestion_count, exclude=args.exclude,
        )
        return await service.suggest(seed, strategy, options)


def main() -> None:
    args = build_parser().parse_args()

    overrides = {
        key: value
        for key, value in (("store", args.store), ("country", args.country))
        if value is not None
    }
    config = AppConfig(**overrides)
    setup_logging(config.log_level)

    logger.info("Running '%s' via CLI", args.command)
    try:
        result = asyncio.run(run(args, config))
    except AsoError as exc:
        logger.error("%s failed: %s", args.command, exc)
        sys.exit(1)

    if isinstance(result, list):
        print(json.dumps(result, indent=2))
    else:
        print(result.model_dump_json(indent=2, by_alias=True))


if __name__ == "__main__":
    main()
