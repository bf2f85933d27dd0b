def set_plan_price(value: dict, plan_id: int, price: float) -> dict:
    """Change a plan's price and drop displayPrice so the store derives it again."""
    for plan in value["plans"]:
        if plan["id"] == plan_id:
            plan["price"] = price
            plan.pop("displayPrice", None)
    return value
