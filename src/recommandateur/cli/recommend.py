"""
CLI for one-shot recommendations.

Runs the same selection as GET /api/v1/recommendations/next against the
configured store and candidate source, and prints the rendered card.
"""

import argparse
import json
import logging

from recommandateur import constants, logging_setup
from recommandateur.adapters.allocine.allocine import build_candidate_source
from recommandateur.errors import NotFoundError, StorageUnavailable, ValidationError
from recommandateur.lists.store import ListStore
from recommandateur.recommendation.selector import RecommendationSelector
from recommandateur.settings import get_settings
from recommandateur.storage.kv import build_kv_store

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Print the next film or series recommendation."
    )

    parser.add_argument(
        "--type",
        required=True,
        choices=list(constants.TITLE_TYPES),
        help="Title type to recommend"
    )

    parser.add_argument(
        "--genre",
        required=True,
        help='Free-text genre query, e.g. "science-fiction" or "tous genres"'
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full recommendation payload as JSON instead of the card"
    )

    args = parser.parse_args(argv)

    cfg = get_settings()
    logging_setup.setup_logging(cfg.log_level)

    try:
        store = ListStore(build_kv_store(cfg))
        selector = RecommendationSelector(store, build_candidate_source(cfg))
        selection = selector.select(args.type, args.genre)
    except (ValidationError, NotFoundError) as e:
        logger.error(f"{e}")
        return 1
    except StorageUnavailable as e:
        logger.error(f"Store unavailable: {e}", exc_info=True)
        return 1

    if args.json:
        print(json.dumps(selection.to_payload(), ensure_ascii=False, indent=2))
    else:
        if selection.intro:
            print(selection.intro)
            print()
        print(selection.formatted_card)
    return 0


if __name__ == "__main__":
    exit(main())
