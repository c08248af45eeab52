from __future__ import annotations

import hmac
import logging

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import SourceUnavailableError, ValidationError

logger = logging.getLogger(__name__)


def _secret_matches(provided: str | None, expected: str | None) -> bool:
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def register(app: Flask, container: Container) -> None:
    def _poll_allowed() -> bool:
        """Scheduler (bearer CRON_SECRET) or a same-origin call from the admin UI."""
        if not app.config.get("ENFORCE_POLL_AUTH"):
            return True

        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer ") and _secret_matches(auth_header[len("Bearer "):], app.config.get("CRON_SECRET")):
            return True

        host = request.host
        origin = request.headers.get("Origin") or ""
        referer = request.headers.get("Referer") or ""
        return bool(host) and (host in origin or host in referer)

    @app.route("/api/firebase/poll", methods=["GET", "POST"], endpoint="firebase_poll")
    def firebase_poll():
        """Run one reconciliation pass over the Firebase attendance tree."""
        if not _poll_allowed():
            logger.warning("[firebase-poll] unauthorized access attempt from %s", request.remote_addr)
            return jsonify({"error": "Unauthorized"}), 401

        try:
            summary = container.reconciliation_service.run()
        except SourceUnavailableError as e:
            logger.error("[firebase-poll] source unavailable: %s", e)
            return jsonify({"error": str(e), "code": e.code}), 500
        except Exception as e:
            logger.exception("[firebase-poll] run failed")
            return jsonify({"error": str(e), "code": "INTERNAL_ERROR"}), 500

        return jsonify(summary.to_dict()), 200

    @app.route("/api/firebase/sync", methods=["POST"], endpoint="firebase_sync")
    def firebase_sync():
        """Webhook for push delivery of one tag's events."""
        if not _secret_matches(request.headers.get("x-firebase-secret"), app.config.get("SYNC_SECRET")):
            return jsonify({"error": "Unauthorized"}), 401

        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return jsonify({"error": "Invalid JSON body", "code": "INVALID_BODY"}), 400

        try:
            outcomes = container.reconciliation_service.sync_tag(body.get("tagUid"), body)
        except ValidationError as e:
            return jsonify({"error": str(e), "code": e.code}), 400
        except Exception as e:
            logger.exception("[firebase-sync] failed")
            return jsonify({"error": str(e), "code": "INTERNAL_ERROR"}), 500

        return jsonify({
            "success": True,
            "processed": len(outcomes),
            "results": [o.to_dict() for o in outcomes],
        }), 200
