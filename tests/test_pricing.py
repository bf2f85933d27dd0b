import pytest

from configstore.pricing import QuoteError, build_quote
from configstore.seed import DEFAULT_PRICING, PRICING_KEY

from .helpers import set_plan_price


class TestBuildQuote:
    def test_discounted_state(self):
        quote = build_quote(DEFAULT_PRICING, 1, "Wyoming")
        assert quote.base_price == 129
        assert quote.state_fee == 100
        assert quote.discounted_state_fee == 80
        assert quote.total == 209

    def test_state_without_discount(self):
        quote = build_quote(DEFAULT_PRICING, 2, "Texas")
        assert quote.discounted_state_fee is None
        assert quote.total == 199 + 300

    def test_unknown_plan(self):
        with pytest.raises(QuoteError, match="Unknown plan 9"):
            build_quote(DEFAULT_PRICING, 9, "Texas")

    def test_unknown_state(self):
        with pytest.raises(QuoteError, match="Unknown state"):
            build_quote(DEFAULT_PRICING, 1, "Ontario")

    def test_to_dict(self):
        body = build_quote(DEFAULT_PRICING, 3, "Nevada").to_dict()
        assert body == {
            "plan": {"id": 3, "name": "Premium"},
            "state": "Nevada",
            "basePrice": 249,
            "stateFee": 425,
            "discountedStateFee": 325,
            "total": 574,
        }


class TestQuoteEndpoint:
    def test_quote(self, client):
        resp = client.get("/api/pricing/quote?plan=1&state=New%20Mexico")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["total"] == 129 + 40
        assert body["version"] == 1
        assert resp.headers["Cache-Control"] == "no-store"

    def test_quote_follows_latest_prices(self, client):
        doc = client.get(f"/api/config/{PRICING_KEY}").get_json()
        value = set_plan_price(doc["value"], 1, 100)
        client.put(f"/api/config/{PRICING_KEY}", json={"value": value, "expectedVersion": 1})

        body = client.get("/api/pricing/quote?plan=1&state=Texas").get_json()
        assert body["basePrice"] == 100
        assert body["total"] == 400
        assert body["version"] == 2

    @pytest.mark.parametrize("query", ["", "?plan=1", "?state=Texas", "?plan=abc&state=Texas"])
    def test_missing_params(self, client, query):
        resp = client.get(f"/api/pricing/quote{query}")
        assert resp.status_code == 400

    def test_unknown_plan(self, client):
        resp = client.get("/api/pricing/quote?plan=42&state=Texas")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Unknown plan 42"}
