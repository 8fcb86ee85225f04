from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from catalogsync.adapters.manual_seed import DEFAULT_SEED_SOURCE, SeedFileError
from catalogsync.app import (
    create_override,
    delete_override,
    ingest_manual_seed,
    list_overrides,
    observe_offer,
    refresh_offer_heads_job,
    update_override,
)
from catalogsync.config import configure_logging
from catalogsync.domain.model import CanonicalType
from catalogsync.domain.overrides import AdminOverrideError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from catalogsync.domain.model import JsonValue

log = logging.getLogger(__name__)

_CANONICAL_TYPES = [str(member) for member in CanonicalType]


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Maintain the canonical catalog")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Resolve a JSON seed file into the catalog")
    ingest.add_argument("path", type=Path, help="Seed file with products, plants and offers")
    ingest.add_argument(
        "--source",
        type=str,
        default=DEFAULT_SEED_SOURCE,
        help="Source name recorded on entity mappings (default: %(default)s)",
    )

    override = subparsers.add_parser("override", help="Normalization override maintenance")
    override_sub = override.add_subparsers(dest="override_command", required=True)

    override_create = override_sub.add_parser("create", help="Create an override")
    _add_override_target_arguments(override_create)

    override_update = override_sub.add_parser("update", help="Replace an existing override")
    override_update.add_argument("--override-id", type=str, required=True)
    _add_override_target_arguments(override_update)

    override_delete = override_sub.add_parser("delete", help="Delete an override")
    override_delete.add_argument("--override-id", type=str, required=True)
    override_delete.add_argument("--actor", type=str, required=True, help="Acting user id")

    override_list = override_sub.add_parser("list", help="List overrides")
    override_list.add_argument("--canonical-type", choices=_CANONICAL_TYPES)
    override_list.add_argument("--canonical-id", type=str)

    offer = subparsers.add_parser("offer", help="Offer observation commands")
    offer_sub = offer.add_subparsers(dest="offer_command", required=True)
    offer_observe = offer_sub.add_parser("observe", help="Record a price/stock observation")
    offer_observe.add_argument("--offer-id", type=str, required=True)
    offer_observe.add_argument("--price-cents", type=int, help="Observed price in cents")
    offer_observe.add_argument("--currency", type=str, help="Observed ISO currency code")
    stock = offer_observe.add_mutually_exclusive_group()
    stock.add_argument("--in-stock", dest="in_stock", action="store_true", default=None)
    stock.add_argument("--out-of-stock", dest="in_stock", action="store_false")
    offer_observe.add_argument(
        "--product-image-url",
        type=str,
        help="Image seen on the listing; fills the product image when it has none",
    )
    offer_refresh = offer_sub.add_parser("refresh", help="HEAD-probe stale offer URLs")
    offer_refresh.add_argument("--offer-id", type=str, help="Probe only this offer")

    return parser.parse_args(list(argv))


def _add_override_target_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--canonical-type", choices=_CANONICAL_TYPES, required=True)
    parser.add_argument("--canonical-id", type=str, required=True)
    parser.add_argument(
        "--field-path",
        type=str,
        required=True,
        help="Dot-separated path, e.g. specs.wattage",
    )
    parser.add_argument("--value", type=str, required=True, help="JSON encoded value")
    parser.add_argument("--reason", type=str, required=True)
    parser.add_argument("--actor", type=str, required=True, help="Acting user id")


def _parse_json_value(value: str) -> JsonValue:
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON value: {value}") from exc


def _validate_args(args: argparse.Namespace) -> None:
    if args.command == "override" and args.override_command in {"create", "update"}:
        args.value = _parse_json_value(args.value)
    if (
        args.command == "offer"
        and args.offer_command == "observe"
        and args.price_cents is not None
        and args.price_cents < 0
    ):
        raise ValueError("Price cents must be non-negative")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate_args(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _dispatch(parsed_args)
    except (AdminOverrideError, SeedFileError) as exc:
        log.error("Rejected: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def _dispatch(args: argparse.Namespace) -> None:
    if args.command == "ingest":
        summary = ingest_manual_seed(args.path, source=args.source)
        for label, stats in (
            ("products", summary.products),
            ("plants", summary.plants),
            ("offers", summary.offers),
        ):
            log.info(
                "%s: processed=%s inserted=%s updated=%s failed=%s",
                label,
                stats.processed,
                stats.inserted,
                stats.updated,
                stats.failed,
            )
    elif args.command == "override":
        _dispatch_override(args)
    elif args.command == "offer" and args.offer_command == "observe":
        result = observe_offer(
            args.offer_id,
            price_cents=args.price_cents,
            currency=args.currency,
            in_stock=args.in_stock,
            product_image_url=args.product_image_url,
        )
        log.info(
            "Offer %s observed: meaningful_change=%s, price_history_appended=%s, "
            "product_image_hydrated=%s",
            args.offer_id,
            result.meaningful_change,
            result.price_history_appended,
            result.product_image_hydrated,
        )
    elif args.command == "offer" and args.offer_command == "refresh":
        refresh = refresh_offer_heads_job(offer_id=args.offer_id)
        log.info(
            "Offer refresh: scanned=%s checked=%s failed=%s",
            refresh.scanned,
            refresh.checked,
            refresh.failed,
        )
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def _dispatch_override(args: argparse.Namespace) -> None:
    if args.override_command == "create":
        override = create_override(
            canonical_type=args.canonical_type,
            canonical_id=args.canonical_id,
            field_path=args.field_path,
            value=args.value,
            reason=args.reason,
            actor_user_id=args.actor,
        )
        log.info("Created override %s", override.id)
    elif args.override_command == "update":
        override = update_override(
            override_id=args.override_id,
            canonical_type=args.canonical_type,
            canonical_id=args.canonical_id,
            field_path=args.field_path,
            value=args.value,
            reason=args.reason,
            actor_user_id=args.actor,
        )
        log.info("Updated override %s", override.id)
    elif args.override_command == "delete":
        delete_override(override_id=args.override_id, actor_user_id=args.actor)
        log.info("Deleted override %s", args.override_id)
    elif args.override_command == "list":
        for override in list_overrides(
            canonical_type=args.canonical_type,
            canonical_id=args.canonical_id,
        ):
            log.info(
                "%s %s:%s %s=%s (%s)",
                override.id,
                override.canonical_type,
                override.canonical_id,
                override.field_path,
                json.dumps(override.value),
                override.reason,
            )
    else:
        raise ValueError(f"Unsupported override command: {args.override_command}")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
