import argparse
import json
import sys
import logging

import config
from .datasource import registry
from .models import ListingType
from .services import FeeService
from .storage import update_commission_setting


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=config.LOG_FORMAT,
        datefmt='%H:%M:%S'
    )


def _cmd_quote(service: FeeService, args) -> dict:
    if args.rate is None and args.volume is not None:
        fee = service.compute_fee_for_volume(args.amount, args.listing_type, args.volume, args.promotion_fee)
    else:
        fee = service.compute_fee(args.amount, args.listing_type, args.rate, args.promotion_fee)
    return fee.to_dict()


def _cmd_tiers(service: FeeService, args) -> list:
    return service.volume_tiers()


def _cmd_examples(service: FeeService, args) -> list:
    return [ex.to_dict() for ex in service.fee_examples(args.amounts)]


def _cmd_set_rate(service: FeeService, args) -> dict:
    is_active = None
    if args.inactive:
        is_active = False
    elif args.active:
        is_active = True
    return update_commission_setting(args.listing_type, rate=args.rate, is_active=is_active,
                                     backup=args.backup)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fee-kit",
        description="Seller commission and fee calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  # Fee on a $100 Buy It Now sale
  fee-kit quote --amount 100 --listing-type buy_it_now

  # Same sale for a seller doing $3000 a month (Gold tier)
  fee-kit quote --amount 250 --volume 3000

  # Lower the Make Offer commission, keeping a backup of the settings file
  fee-kit set-rate --listing-type make_offer --rate 4.5 --backup
        """
    )
    parser.add_argument("--source", default=config.CONFIG_SOURCE, choices=registry.codes(),
                        help="Configuration source (default: %(default)s)")
    parser.add_argument("--log", default=config.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level")
    sub = parser.add_subparsers(dest="command", required=True)

    quote = sub.add_parser("quote", help="Commission and net earnings for one sale")
    quote.add_argument("--amount", required=True, help="Sale amount in USD")
    quote.add_argument("--listing-type", default=ListingType.BUY_IT_NOW.value,
                       help="buy_it_now, make_offer or classified")
    quote.add_argument("--rate", default=None, help="Explicit commission rate %% (overrides everything)")
    quote.add_argument("--volume", default=None, help="Trailing monthly sales volume in USD")
    quote.add_argument("--promotion-fee", default=0, help="Promotion fees to deduct")
    quote.set_defaults(func=_cmd_quote)

    tiers = sub.add_parser("tiers", help="List volume incentive tiers")
    tiers.set_defaults(func=_cmd_tiers)

    examples = sub.add_parser("examples", help="Fee example grid")
    examples.add_argument("--amounts", nargs="+", default=None, help="Sale amounts")
    examples.set_defaults(func=_cmd_examples)

    set_rate = sub.add_parser("set-rate", help="Update a commission setting")
    set_rate.add_argument("--listing-type", required=True, choices=[lt.value for lt in ListingType])
    set_rate.add_argument("--rate", default=None, help="New commission rate %%")
    state = set_rate.add_mutually_exclusive_group()
    state.add_argument("--active", action="store_true", help="Mark the setting active")
    state.add_argument("--inactive", action="store_true", help="Mark the setting inactive")
    set_rate.add_argument("--backup", action="store_true", help="Back up the settings CSV first")
    set_rate.set_defaults(func=_cmd_set_rate)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log)

    try:
        service = FeeService(registry, source=args.source)
        result = args.func(service, args)
        print(json.dumps(result, ensure_ascii=False, indent=2))
    except Exception as e:
        logging.error(f"Command failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
