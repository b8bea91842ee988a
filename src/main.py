from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from config import DexFeeSchedule, config
from domain.balance import UnifiedBalance
from domain.engine import TransactionEngine, TransactionOutcome, TransactionPlan
from services.balance_sources import load_balance_snapshot
from services.fee_rates import StaticFeeRateProvider
from services.fee_rates_client import HttpFeeRateProvider
from services.routing_fees import StaticRoutingFeeEstimator
from utils.plan_summary import render_outcome

logger = logging.getLogger(__name__)


def build_engine(*, dex_schedule: DexFeeSchedule | None = None) -> TransactionEngine:
    settings = config()
    if dex_schedule is not None and settings.fee_rates_url:
        msg = "a DEX fee schedule only applies to the built-in fee tables, not to a fee rate service"
        raise ValueError(msg)
    if dex_schedule is not None:
        settings = settings.model_copy(update={"dex_fee_schedule": dex_schedule})

    if settings.fee_rates_url:
        rate_provider: Any = HttpFeeRateProvider.from_settings()
    else:
        rate_provider = StaticFeeRateProvider.from_settings(settings)
    return TransactionEngine(rate_provider=rate_provider, routing_fee_estimator=StaticRoutingFeeEstimator())


def load_request_payload(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        msg = f"{path} must contain a JSON object"
        raise ValueError(msg)
    return payload


def run(
    request_path: Path,
    balance_path: Path | None,
    *,
    user_id: str,
    dex_schedule: DexFeeSchedule | None,
    as_json: bool,
) -> TransactionOutcome:
    engine = build_engine(dex_schedule=dex_schedule)
    payload = load_request_payload(request_path)
    if balance_path is not None:
        balance = load_balance_snapshot(balance_path)
    else:
        logger.info("No balance snapshot given, pricing against an empty balance")
        balance = UnifiedBalance()

    outcome = asyncio.run(engine.process_payload(user_id, payload, balance))

    if as_json:
        print(json.dumps(outcome.model_dump(mode="json"), indent=2))
    else:
        render_outcome(outcome)
    return outcome


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Validate, route and price a transaction request.")
    parser.add_argument("--request", type=Path, required=True, help="JSON file with the transaction request")
    parser.add_argument("--balance", type=Path, default=None, help="JSON file with the unified balance snapshot")
    parser.add_argument("--user", default="cli-user")
    parser.add_argument(
        "--dex-schedule",
        type=DexFeeSchedule,
        choices=list(DexFeeSchedule),
        default=None,
        help="DEX fee schedule for the built-in fee tables; not allowed with TXCORE_FEE_RATES_URL",
    )
    parser.add_argument("--json", action="store_true", help="Print the plan as JSON")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)
    if args.dex_schedule is not None and config().fee_rates_url:
        parser.error("--dex-schedule cannot be combined with a fee rate service (TXCORE_FEE_RATES_URL)")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    outcome = run(
        args.request,
        args.balance,
        user_id=args.user,
        dex_schedule=args.dex_schedule,
        as_json=args.json,
    )
    return 0 if isinstance(outcome, TransactionPlan) else 1


if __name__ == "__main__":
    raise SystemExit(main())
