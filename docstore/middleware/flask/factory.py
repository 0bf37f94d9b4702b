"""
This module contains a document store-middleware, i.e. a flask
app-factory that can be used to provide a shared document store and
ranking index via HTTP.
"""

from typing import Any, Optional
from pathlib import Path
import json

from flask import (
    Flask, Blueprint, Response, jsonify, request, send_from_directory
)

from docstore.config import StoreConfig
from docstore.daemon import ExpirationDaemon
from docstore.errors import (
    DocumentStoreError, PathSyntaxError, ConflictError
)
from docstore.logging import Logging
from docstore.models import NOT_FOUND, NO_TTL
from docstore.operations import stage, encode_result
from docstore.store import DocumentStore, RankingIndex, Transaction
from docstore.util import parse_flag


_STATUS = {
    PathSyntaxError: 400,
    ConflictError: 409,
}


def _not_found(what: str) -> Response:
    return Response(f"Unknown {what}.", 404, mimetype="text/plain")


def _json_body() -> dict[str, Any]:
    """Returns request body as JSON-object or raises `ValueError`."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValueError("Expected JSON-object as request body.")
    return body


def _require(body: dict[str, Any], name: str) -> Any:
    if name not in body:
        raise ValueError(f"Missing required field '{name}'.")
    return body[name]


def _values(body: dict[str, Any]) -> list:
    values = _require(body, "values")
    if not isinstance(values, list):
        raise ValueError("Field 'values' needs to be an array.")
    return values


def bp_factory(
    store: DocumentStore,
    ranking: RankingIndex,
    name: Optional[str] = None,
    cors=None,
    config: Optional[StoreConfig] = None,
) -> Blueprint:
    """
    Returns a flask-Blueprint with endpoints for document store and
    ranking index interaction via http. Refer to the API-document
    provided by the `/api-GET`-endpoint.

    Concurrent requests are serialized per key by the store itself.
    """

    bp = Blueprint(name or "docstore", __name__)

    @bp.errorhandler(DocumentStoreError)
    def store_error(exc_info: DocumentStoreError):
        return jsonify(exc_info.json), _STATUS.get(type(exc_info), 422)

    @bp.errorhandler(ValueError)
    def bad_request(exc_info: ValueError):
        return Response(
            f"Bad request: {exc_info}", 400, mimetype="text/plain"
        )

    @bp.route("/doc", methods=["OPTIONS"], provide_automatic_options=False)
    def options_key():
        return jsonify(list(store.keys())), 200

    @bp.route("/doc/<key>", methods=["GET"], provide_automatic_options=False)
    def get_key(key: str):
        value = store.get(key, request.args.get("path"))
        if value is NOT_FOUND:
            return _not_found(f"key '{key}' or path")
        return jsonify(value), 200

    @bp.route("/doc/<key>", methods=["PUT"], provide_automatic_options=False)
    def put_key(key: str):
        try:
            value = json.loads(request.get_data(as_text=True))
        except json.JSONDecodeError as exc_info:
            raise ValueError(
                f"Bad JSON in request body: {exc_info}"
            ) from exc_info
        store.set(key, request.args.get("path"), value)
        return Response("OK", 200, mimetype="text/plain")

    @bp.route(
        "/doc/<key>", methods=["DELETE"], provide_automatic_options=False
    )
    def delete_key(key: str):
        return jsonify(
            {"deleted": store.delete(key, request.args.get("path"))}
        ), 200

    @bp.route("/doc/<key>/numincrby", methods=["POST"])
    def numincrby(key: str):
        body = _json_body()
        value = store.numincrby(
            key, body.get("path"), _require(body, "delta")
        )
        if value is NOT_FOUND:
            return _not_found(f"key '{key}' or path")
        return jsonify({"value": value}), 200

    @bp.route("/doc/<key>/arrappend", methods=["POST"])
    def arrappend(key: str):
        body = _json_body()
        length = store.arrappend(key, body.get("path"), *_values(body))
        if length is NOT_FOUND:
            return _not_found(f"key '{key}' or path")
        return jsonify({"length": length}), 200

    @bp.route("/doc/<key>/arrinsert", methods=["POST"])
    def arrinsert(key: str):
        body = _json_body()
        length = store.arrinsert(
            key, body.get("path"), _require(body, "index"), *_values(body)
        )
        if length is NOT_FOUND:
            return _not_found(f"key '{key}' or path")
        return jsonify({"length": length}), 200

    @bp.route("/doc/<key>/arrpop", methods=["POST"])
    def arrpop(key: str):
        body = _json_body()
        value = store.arrpop(key, body.get("path"), body.get("index", -1))
        if value is NOT_FOUND:
            return _not_found(f"key '{key}' or path")
        return jsonify({"value": value}), 200

    @bp.route("/doc/<key>/expire", methods=["POST"])
    def expire(key: str):
        if store.expire(key, _require(_json_body(), "ttl")) is NOT_FOUND:
            return _not_found(f"key '{key}'")
        return Response("OK", 200, mimetype="text/plain")

    @bp.route("/doc/<key>/persist", methods=["POST"])
    def persist(key: str):
        if store.persist(key) is NOT_FOUND:
            return _not_found(f"key '{key}'")
        return Response("OK", 200, mimetype="text/plain")

    @bp.route("/doc/<key>/ttl", methods=["GET"])
    def ttl(key: str):
        remaining = store.ttl(key)
        if remaining is NOT_FOUND:
            return _not_found(f"key '{key}'")
        return jsonify(
            {"ttl": None if remaining is NO_TTL else remaining}
        ), 200

    @bp.route("/doc/<key>/version", methods=["GET"])
    def version(key: str):
        return jsonify({"version": store.version(key)}), 200

    @bp.route("/transaction", methods=["POST"])
    def transaction():
        body = _json_body()
        watched = body.get("watch", {})
        if not isinstance(watched, dict) or not all(
            v is None or (isinstance(v, int) and not isinstance(v, bool))
            for v in watched.values()
        ):
            raise ValueError(
                "Field 'watch' needs to be an object of key-versions."
            )
        operations = body.get("operations", [])
        if not isinstance(operations, list):
            raise ValueError("Field 'operations' needs to be an array.")
        _transaction = Transaction(store, watched)
        for operation in operations:
            stage(_transaction, operation)
        return jsonify(
            {
                "results": [
                    encode_result(result)
                    for result in _transaction.commit()
                ]
            }
        ), 200

    @bp.route("/ranking", methods=["GET"])
    def zrange():
        return jsonify(
            [
                {"member": member, "score": score}
                for member, score in ranking.range_by_rank(
                    int(request.args.get("start", 0)),
                    int(request.args.get("end", -1)),
                    parse_flag(request.args.get("descending"), True),
                )
            ]
        ), 200

    @bp.route("/ranking/<member>", methods=["GET"])
    def zscore(member: str):
        score = ranking.score(member)
        if score is NOT_FOUND:
            return _not_found(f"member '{member}'")
        return jsonify({"score": score}), 200

    @bp.route("/ranking/<member>", methods=["POST"])
    def zincrby(member: str):
        delta = _require(_json_body(), "delta")
        return jsonify({"score": ranking.incrby(member, delta)}), 200

    @bp.route("/ranking/<member>", methods=["DELETE"])
    def zrem(member: str):
        return jsonify({"removed": ranking.remove(member)}), 200

    @bp.route("/ranking/<member>/rank", methods=["GET"])
    def zrank(member: str):
        rank = ranking.rank(
            member, parse_flag(request.args.get("descending"), True)
        )
        if rank is NOT_FOUND:
            return _not_found(f"member '{member}'")
        return jsonify({"rank": rank}), 200

    @bp.route("/config", methods=["GET"])
    def config_():
        return jsonify(
            {
                "store": {
                    "backend": store.__class__.__name__,
                    "keys": len(store),
                },
                "ranking": {"members": len(ranking)},
                "cors": cors is not None,
                "service": (
                    config.CONTAINER_SELF_DESCRIPTION if config else None
                ),
            }
        ), 200

    @bp.route("/api", methods=["GET"])
    def api():
        return send_from_directory(
            Path(__file__).parent,
            "openapi.yaml",
            mimetype="application/yaml"
        )
    return bp


def app_factory(
    store: Optional[DocumentStore] = None,
    ranking: Optional[RankingIndex] = None,
    config: Optional[StoreConfig] = None,
    name: Optional[str] = None,
) -> Flask:
    """
    Returns a flask-app object that allows document store and ranking
    index interaction via http. Refer to the API-document provided by
    the `/api-GET`-endpoint.

    The app's `ExpirationDaemon` (started if
    `config.SWEEP_AT_STARTUP`) is available as
    `app.extensions["docstore"]["daemon"]`.

    Keyword arguments:
    store -- `DocumentStore` to be served
             (default None; creates a new instance)
    ranking -- `RankingIndex` to be served
               (default None; creates a new instance)
    config -- app configuration
              (default None; uses `StoreConfig`)
    name -- flask app name
            (default None; uses module name)
    """

    config = config or StoreConfig()
    if store is None:
        store = DocumentStore()
    if ranking is None:
        ranking = RankingIndex()

    app = Flask(name or __name__)

    # handle CORS
    cors = None
    if config.ALLOW_CORS:
        try:
            from flask_cors import CORS
        except ImportError:
            Logging.error(
                "Missing package 'Flask-CORS' for 'ALLOW_CORS=1'. "
                + "CORS-requests will not work."
            )
        else:
            cors = CORS(app)

    daemon = ExpirationDaemon(
        store, config.SWEEP_INTERVAL, config.SWEEP_LIMIT
    )
    if config.SWEEP_AT_STARTUP:
        daemon.run(daemon=True)
        Logging.info(
            f"Started expiration sweep ({config.SWEEP_INTERVAL}s interval)."
        )

    app.extensions["docstore"] = {
        "store": store,
        "ranking": ranking,
        "daemon": daemon,
    }
    app.register_blueprint(
        bp_factory(store, ranking, "docstore", cors, config),
        url_prefix="/",
    )

    return app
