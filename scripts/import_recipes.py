"""
CLI helper to bulk-load recipes from a JSON file into the catalog store.

The file holds a JSON array of objects with ``title``, ``ingredients``,
``instructions`` and optionally ``cooking_time`` (or ``cookingTime``) and
``category``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pydantic import ValidationError

from catalog.dependencies import get_recipe_store
from catalog.models import RecipeInput

logger = logging.getLogger(__name__)


def load_inputs(path: Path) -> list[dict]:
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON array of recipes")
    return payload


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import recipes into the catalog")
    parser.add_argument("path", type=Path, help="JSON file with a list of recipes")
    parser.add_argument(
        "-u",
        "--user",
        required=True,
        help="Username recorded as the creator of every imported recipe",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file without writing anything",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    store = get_recipe_store()
    imported = 0
    for index, raw in enumerate(load_inputs(args.path)):
        if isinstance(raw, dict) and "cookingTime" in raw:
            raw = dict(raw)
            raw["cooking_time"] = raw.pop("cookingTime")
        try:
            recipe_input = RecipeInput.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Skipping entry %d: %s", index, exc)
            continue
        if args.dry_run:
            logger.info("Entry %d is valid: %s", index, recipe_input.title)
            imported += 1
            continue
        created = store.create_recipe(recipe_input.to_recipe(), args.user)
        logger.info("Imported '%s' as %s", created.title, created.id)
        imported += 1

    logger.info("Imported %d recipes", imported)
    return 0 if imported > 0 else 1


if __name__ == "__main__":
    sys.exit(main())
