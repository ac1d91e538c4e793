"""
KestrelPay - Main Flask Application
Application factory and REST API routes.
"""

import json
import logging
import random

from pathlib import Path
from typing import Optional
from flask import Flask, jsonify, request
from flask_cors import CORS

from .config import AppConfig, ConfigManager
from .intents import IntentManager, ExecutionNotRecommended, IntentNotPending
from .models import IntentDescriptor, SnapshotUnavailable, create_snapshot_provider
from .swarm import SwarmEngine
from .utils import ResourceMonitor, utc_timestamp


logger = logging.getLogger(__name__)


def create_app(config_path: str = None, config: Optional[AppConfig] = None, engine: Optional[SwarmEngine] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_path: Optional path to the directory holding config/.
        config: Prebuilt configuration; skips loading YAML.
        engine: Prebuilt swarm engine; built from config if omitted.

    Returns:
        Configured Flask application.
    """
    if config is None:
        base_path = Path(config_path) if config_path else Path(__file__).parent.parent
        config = ConfigManager(base_path).load()

    if engine is None:
        rng = random.Random(config.swarm.seed)
        provider = create_snapshot_provider(config.snapshots, rng)
        engine = SwarmEngine.from_config(config.swarm, provider, rng)

    app = Flask(__name__)

    # Frontend runs on a separate origin
    CORS(app)

    app.config["KESTRELPAY_CONFIG"] = config
    app.config["KESTRELPAY_ENGINE"] = engine
    app.config["KESTRELPAY_INTENTS"] = IntentManager(engine, config.intents)
    app.config["KESTRELPAY_MONITOR"] = ResourceMonitor(config.max_ram_percent)

    register_routes(app)

    logger.info(
        "%s initialized with %d scorers (%s snapshots)",
        config.service_name, len(engine.scorers), config.snapshots.source.value
    )
    return app


def register_routes(app: Flask):
    """Register all application routes."""

    # =========================================================================
    # Intent API
    # =========================================================================

    @app.route("/api/intents/create", methods=["POST"])
    def create_intent():
        """Create a pending intent with an initial swarm analysis."""
        manager = app.config["KESTRELPAY_INTENTS"]
        data = request.get_json(silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400

        try:
            intent = manager.create_intent(
                receiver=data.get("receiver"),
                amount=data.get("amount"),
                condition_type=data.get("condition_type", data.get("conditionType")),
                condition_value=data.get("condition_value", data.get("conditionValue")),
                sender=data.get("sender"),
                token=data.get("token")
            )
        except SnapshotUnavailable as e:
            return jsonify({"error": str(e)}), 503
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({
            "success": True,
            "intent_id": intent.id,
            "swarm_analysis": intent.swarm_analysis,
            "message": "Intent created successfully"
        })

    @app.route("/api/intents/execute/<intent_id>", methods=["POST"])
    def execute_intent(intent_id: str):
        """Execute an intent if a final swarm check recommends it."""
        manager = app.config["KESTRELPAY_INTENTS"]

        try:
            intent = manager.execute_intent(intent_id)
        except ExecutionNotRecommended as e:
            return jsonify({
                "error": str(e),
                "analysis": e.recommendation.to_dict()
            }), 400
        except IntentNotPending as e:
            return jsonify({"error": str(e)}), 400
        except SnapshotUnavailable as e:
            return jsonify({"error": str(e)}), 503

        if not intent:
            return jsonify({"error": "Intent not found"}), 404

        return jsonify({
            "success": True,
            "intent_id": intent.id,
            "analysis": intent.final_analysis,
            "message": "Intent executed successfully"
        })

    @app.route("/api/intents/cancel/<intent_id>", methods=["POST"])
    def cancel_intent(intent_id: str):
        """Cancel a pending intent."""
        manager = app.config["KESTRELPAY_INTENTS"]

        try:
            intent = manager.cancel_intent(intent_id)
        except IntentNotPending as e:
            return jsonify({"error": str(e)}), 400

        if not intent:
            return jsonify({"error": "Intent not found"}), 404

        return jsonify({
            "success": True,
            "intent_id": intent.id,
            "message": "Intent cancelled"
        })

    @app.route("/api/intents/user/<address>", methods=["GET"])
    def get_user_intents(address: str):
        """Get a sender's intents, newest first."""
        manager = app.config["KESTRELPAY_INTENTS"]
        intents = [i.to_dict() for i in manager.get_user_intents(address)]
        return jsonify({
            "success": True,
            "intents": intents,
            "count": len(intents)
        })

    @app.route("/api/intents/analytics/overview", methods=["GET"])
    def get_analytics():
        """Intent counters and swarm status."""
        manager = app.config["KESTRELPAY_INTENTS"]
        return jsonify({"success": True, **manager.get_analytics()})

    # =========================================================================
    # Swarm API
    # =========================================================================

    @app.route("/api/swarm/status", methods=["GET"])
    def get_swarm_status():
        """Population composition and last decision time."""
        engine = app.config["KESTRELPAY_ENGINE"]
        return jsonify({"success": True, "status": engine.get_status()})

    @app.route("/api/swarm/recommendation", methods=["GET"])
    def get_recommendation():
        """Evaluate an ad-hoc intent passed as JSON in ?intentData=."""
        engine = app.config["KESTRELPAY_ENGINE"]
        raw = request.args.get("intentData")

        try:
            data = json.loads(raw) if raw else {}
            if not isinstance(data, dict):
                raise ValueError("intentData must be a JSON object")
            descriptor = IntentDescriptor.from_dict(data)
            recommendation = engine.evaluate(descriptor)
        except SnapshotUnavailable as e:
            return jsonify({"error": str(e)}), 503
        except (ValueError, TypeError) as e:
            return jsonify({"error": str(e)}), 400

        return jsonify({"success": True, "recommendation": recommendation.to_dict()})

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.route("/api/health", methods=["GET"])
    def health_check():
        """Health check endpoint."""
        config = app.config["KESTRELPAY_CONFIG"]
        monitor = app.config["KESTRELPAY_MONITOR"]

        return jsonify({
            "status": "OK",
            "timestamp": utc_timestamp(),
            "service": config.service_name,
            "version": config.version,
            "system": monitor.get_status()
        })
