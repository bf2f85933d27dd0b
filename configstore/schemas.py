from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

BOOLEAN_PLAN_FIELDS = ("isRecommended", "hasAssistBadge")

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def coerce_flag(v: Any) -> Any:
    """Coerce loosely-typed storage values ("true", 1, None) to bool.

    Anything unrecognised is returned unchanged so the model can reject it.
    """
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)) and v in (0, 1):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
    return v


def normalize_plan_flags(value: Any) -> Any:
    """Coerce boolean flags on every plan entry of a raw document in place."""
    if not isinstance(value, dict):
        return value
    plans = value.get("plans")
    if not isinstance(plans, list):
        return value
    for plan in plans:
        if not isinstance(plan, dict):
            continue
        for field in BOOLEAN_PLAN_FIELDS:
            if field in plan:
                plan[field] = coerce_flag(plan[field])
    return value


def format_display_price(price: float) -> str:
    """129 -> "$129", 129.5 -> "$129.50"."""
    if float(price).is_integer():
        return f"${int(price):,}"
    return f"${price:,.2f}"


def parse_display_price(display: str) -> float | None:
    cleaned = display.strip().replace("$", "").replace(",", "")
    try:
        return float(cleaned)
    except ValueError:
        return None


def _strip_feature(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Feature must not be empty")
    return v


Flag = Annotated[bool, BeforeValidator(coerce_flag)]
Feature = Annotated[str, AfterValidator(_strip_feature)]
Money = Annotated[float, Field(ge=0)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class Plan(CamelModel):
    id: int
    name: str = Field(..., min_length=1, max_length=128)
    price: Money
    display_price: str | None = None
    billing_cycle: Literal["monthly", "annual", "one-time"]
    description: str = ""
    features: list[Feature] = Field(default_factory=list)
    is_recommended: Flag = False
    has_assist_badge: Flag = False
    includes_package: str | None = None

    @model_validator(mode="after")
    def check_display_price(self):
        if self.display_price is None or not self.display_price.strip():
            self.display_price = format_display_price(self.price)
            return self
        shown = parse_display_price(self.display_price)
        if shown is None or abs(shown - self.price) > 0.005:
            raise ValueError(
                f"displayPrice {self.display_price!r} does not match price {self.price}"
            )
        return self


class PricingDocument(CamelModel):
    """Pricing plans plus per-state filing fee tables."""

    plans: list[Plan] = Field(..., min_length=1)
    state_filing_fees: dict[str, Money]
    state_discounts: dict[str, Money] = Field(default_factory=dict)
    state_descriptions: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_unique_plan_ids(self):
        seen = set()
        for plan in self.plans:
            if plan.id in seen:
                raise ValueError(f"Duplicate plan id {plan.id}")
            seen.add(plan.id)
        return self

    def find_plan(self, plan_id: int) -> Plan | None:
        return next((p for p in self.plans if p.id == plan_id), None)


class PutDocumentRequest(CamelModel):
    value: dict[str, Any]
    expected_version: StrictInt | None = Field(default=None, ge=0)


def dump_document(model: BaseModel) -> dict:
    """Serialize a validated document back to its camelCase JSON form."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def validation_details(e: ValidationError) -> list[dict]:
    """Field-level error list safe to return to API clients."""
    details = []
    for err in e.errors(include_context=False, include_url=False):
        msg = err.get("msg", "Validation failed")
        # Strip "Value error, " prefix that Pydantic adds
        if msg.startswith("Value error, "):
            msg = msg[13:]
        details.append(
            {
                "field": ".".join(str(p) for p in err.get("loc", ())),
                "message": msg,
                "type": err.get("type"),
            }
        )
    return details
