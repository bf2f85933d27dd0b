"""Versioned document API.

Clients GET a document, edit a local copy, then PUT it back with the version
they read. A 409 means someone else saved first: re-fetch, reapply, resubmit.
"""

import re

from flask import Blueprint, jsonify, request
from pydantic import ValidationError
from werkzeug.exceptions import BadRequest

from ...db import get_store
from ...schemas import PutDocumentRequest, validation_details
from ...store import (
    StorageUnavailable,
    UnknownDocument,
    ValidationFailed,
    VersionConflict,
)

bp = Blueprint("api_documents", __name__, url_prefix="/config")

_ETAG_RE = re.compile(r'^\s*(?:W/)?"?(\d+)"?\s*$')


def _no_store(response):
    # Stale reads would hand clients an outdated version to write against
    response.headers["Cache-Control"] = "no-store"
    return response


def _if_match_version() -> int | None:
    header = request.headers.get("If-Match")
    if not header:
        return None
    match = _ETAG_RE.match(header)
    if not match:
        raise BadRequest("If-Match must be a quoted version number")
    return int(match.group(1))


def read_document(key: str):
    try:
        doc = get_store().get(key)
    except UnknownDocument:
        return jsonify({"error": "not found"}), 404
    except StorageUnavailable:
        return jsonify({"error": "storage unavailable"}), 500

    response = jsonify(doc.to_dict())
    response.headers["ETag"] = f'"{doc.version}"'
    return _no_store(response)


def write_document(key: str):
    body = request.get_json(silent=True)
    if body is None:
        return jsonify({"error": "request body required"}), 400

    try:
        data = PutDocumentRequest.model_validate(body)
        expected_version = data.expected_version
        if expected_version is None:
            expected_version = _if_match_version()
    except ValidationError as e:
        return jsonify({"error": "validation failed", "details": validation_details(e)}), 400
    except BadRequest as e:
        return jsonify({"error": e.description}), 400

    try:
        version = get_store().put(key, data.value, expected_version)
    except ValidationFailed as e:
        return jsonify({"error": "validation failed", "details": e.details}), 400
    except VersionConflict as e:
        return jsonify(
            {
                "error": "version conflict",
                "currentVersion": e.current_version,
                "expectedVersion": e.expected_version,
            }
        ), 409
    except UnknownDocument:
        return jsonify({"error": "not found"}), 404
    except StorageUnavailable:
        return jsonify({"error": "storage unavailable"}), 500

    response = jsonify({"key": key, "version": version})
    response.headers["ETag"] = f'"{version}"'
    return _no_store(response)


@bp.get("")
def list_documents():
    """Operator view of every stored document (version, timestamps, preview)."""
    try:
        documents = get_store().describe()
    except StorageUnavailable:
        return jsonify({"error": "storage unavailable"}), 500
    return _no_store(jsonify({"documents": documents, "count": len(documents)}))


@bp.get("/<key>")
def get_document(key: str):
    return read_document(key)


@bp.put("/<key>")
def put_document(key: str):
    return write_document(key)
