"""Checkout price of a plan in a given state, derived from the pricing document."""

from dataclasses import dataclass

from .schemas import PricingDocument


class QuoteError(LookupError):
    pass


@dataclass(frozen=True)
class Quote:
    plan_id: int
    plan_name: str
    state: str
    base_price: float
    state_fee: float
    discounted_state_fee: float | None

    @property
    def total(self) -> float:
        fee = self.state_fee if self.discounted_state_fee is None else self.discounted_state_fee
        return self.base_price + fee

    def to_dict(self) -> dict:
        return {
            "plan": {"id": self.plan_id, "name": self.plan_name},
            "state": self.state,
            "basePrice": self.base_price,
            "stateFee": self.state_fee,
            "discountedStateFee": self.discounted_state_fee,
            "total": self.total,
        }


def build_quote(value: dict, plan_id: int, state: str) -> Quote:
    """Plan price plus the state's filing fee, using the discounted fee where one exists.

    Raises QuoteError if the plan or state is not in the document.
    """
    pricing = PricingDocument.model_validate(value)

    plan = pricing.find_plan(plan_id)
    if plan is None:
        raise QuoteError(f"Unknown plan {plan_id}")
    if state not in pricing.state_filing_fees:
        raise QuoteError(f"Unknown state {state!r}")

    return Quote(
        plan_id=plan.id,
        plan_name=plan.name,
        state=state,
        base_price=plan.price,
        state_fee=pricing.state_filing_fees[state],
        discounted_state_fee=pricing.state_discounts.get(state),
    )
