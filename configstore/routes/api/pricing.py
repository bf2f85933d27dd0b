"""Pricing endpoints - the pricing document under its public path, plus quotes."""

from flask import Blueprint, jsonify, request

from ...db import get_store
from ...pricing import QuoteError, build_quote
from ...seed import PRICING_KEY
from ...store import StorageUnavailable
from .documents import read_document, write_document

bp = Blueprint("api_pricing", __name__, url_prefix="/pricing")


@bp.get("")
def get_pricing():
    return read_document(PRICING_KEY)


@bp.route("", methods=["PUT", "POST"])
def save_pricing():
    return write_document(PRICING_KEY)


@bp.get("/quote")
def quote():
    """Total for a plan in a state: plan price plus (discounted) filing fee."""
    plan_id = request.args.get("plan", type=int)
    state = request.args.get("state", "").strip()
    if plan_id is None or not state:
        return jsonify({"error": "plan and state are required"}), 400

    try:
        doc = get_store().get(PRICING_KEY)
    except StorageUnavailable:
        return jsonify({"error": "storage unavailable"}), 500

    try:
        result = build_quote(doc.value, plan_id, state)
    except QuoteError as e:
        return jsonify({"error": str(e)}), 404

    response = jsonify({**result.to_dict(), "version": doc.version})
    response.headers["Cache-Control"] = "no-store"
    return response
