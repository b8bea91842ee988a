from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from domain.engine import TransactionOutcome, TransactionPlan
from domain.fee_calculator import effective_rate
from domain.fees import FEE_COMPONENTS
from domain.validation import parse_amount

from .formatting import format_currency, format_decimal, format_percent


@dataclass
class FeeLine:
    component: str
    amount: Decimal


@dataclass
class PlanSummary:
    transaction_type: str
    amount: Decimal
    asset: str | None
    route: str
    needs_routing: bool
    steps: list[str] = field(default_factory=list)
    fees: list[FeeLine] = field(default_factory=list)
    total_fee: Decimal = Decimal(0)
    effective_rate: Decimal = Decimal(0)


def _endpoint_label(chain: object | None, asset: str | None) -> str:
    return f"{chain or '?'}/{asset or '?'}"


def compute_plan_summary(plan: TransactionPlan) -> PlanSummary:
    amount = parse_amount(plan.request.amount) or Decimal(0)
    routing = plan.routing_plan
    rounded = plan.fee_breakdown.rounded()

    return PlanSummary(
        transaction_type=plan.request.type,
        amount=amount,
        asset=plan.request.asset,
        route=(
            f"{_endpoint_label(routing.from_chain, routing.from_asset)} -> "
            f"{_endpoint_label(routing.to_chain, routing.to_asset)}"
        ),
        needs_routing=routing.needs_routing,
        steps=[
            f"{step.action}: {step.from_asset}@{step.from_chain} -> {step.to_asset}@{step.to_chain}"
            for step in routing.steps
        ],
        fees=[FeeLine(component=name, amount=rounded[name]) for name in FEE_COMPONENTS],
        total_fee=rounded["total"],
        effective_rate=effective_rate(plan.fee_breakdown, amount),
    )


def render_plan_summary(summary: PlanSummary) -> None:
    print(f"Transaction: {summary.transaction_type} {format_decimal(summary.amount)} {summary.asset or ''}".rstrip())
    print(f"Route: {summary.route}{' (cross-chain)' if summary.needs_routing else ''}")
    if summary.steps:
        print("Steps:")
        for index, step in enumerate(summary.steps, start=1):
            print(f"  {index}. {step}")

    component_label = "Fee"
    amount_label = "USD"

    rows = [(line.component, format_currency(line.amount)) for line in summary.fees]
    component_width = max(len(component_label), max((len(name) for name, _ in rows), default=0))
    total_text = format_currency(summary.total_fee)
    amount_width = max(len(amount_label), len(total_text), max((len(value) for _, value in rows), default=0))

    header = f"{component_label:<{component_width}} {amount_label:>{amount_width}}"
    lines = [header, "-" * len(header)]
    for name, value in rows:
        lines.append(f"{name:<{component_width}} {value:>{amount_width}}")
    lines.append("-" * len(header))
    lines.append(f"{'total':<{component_width}} {total_text:>{amount_width}}")
    print("\n".join(lines))
    print(f"Effective rate: {format_percent(summary.effective_rate)}")


def render_outcome(outcome: TransactionOutcome) -> None:
    if isinstance(outcome, TransactionPlan):
        render_plan_summary(compute_plan_summary(outcome))
        return
    print(f"Rejected ({outcome.kind}): {outcome.reason}")


__all__ = ["FeeLine", "PlanSummary", "compute_plan_summary", "render_outcome", "render_plan_summary"]
