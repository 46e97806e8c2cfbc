"""HTTP entrypoint that triggers discovery, licence and publish jobs (Cloud Run friendly)."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict

from flask import Flask, jsonify, request

from tradie_hub.core.config import get_settings
from tradie_hub.core.store import StoreError, load_store
from tradie_hub.jobs.discover import run_discovery_job
from tradie_hub.jobs.publish import run_publish_job
from tradie_hub.jobs.verify_licences import run_licence_job

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App & executor ----------
app = Flask(__name__)
# One worker: runs share tradies.json and must never overlap.
_executor = ThreadPoolExecutor(max_workers=1)

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings only, never the store."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "search_backend": settings.search_backend,
                "worker_port_config": settings.worker_port,
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.get("/tradies")
def list_tradies() -> Any:
    """Serve the store document the website consumes."""
    settings = get_settings()
    try:
        document = load_store(settings.data_file)
    except StoreError as exc:
        logger.error("Could not read store: %s", exc)
        return jsonify({"error": "store unavailable"}), 500
    return jsonify({**document.metadata, "tradies": document.tradies}), 200


@app.post("/discover")
def enqueue_discovery() -> Any:
    """
    Enqueue a discovery run.
    Optional JSON fields: locations (list[str]), categories (list[str]), max_calls (int)
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}

    job_args: Dict[str, Any] = {}
    for key in ("locations", "categories"):
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(item, str) and item.strip() for item in value):
            return jsonify({"error": f"{key} must be a list of non-empty strings"}), 400
        job_args[key] = [item.strip() for item in value]

    max_calls_raw = payload.get("max_calls")
    if max_calls_raw is not None:
        try:
            max_calls = int(max_calls_raw)
        except (TypeError, ValueError):
            return jsonify({"error": "max_calls must be numeric"}), 400
        if max_calls <= 0:
            return jsonify({"error": "max_calls must be positive"}), 400
        job_args["max_calls"] = max_calls

    logger.info("Queueing discovery job: %s", job_args)
    _executor.submit(_run_job_safe, run_discovery_job, job_args)
    return jsonify({"data": {"status": "queued", "job": "discover"}}), 202


@app.post("/verify-licences")
def enqueue_licence_check() -> Any:
    logger.info("Queueing licence verification job")
    _executor.submit(_run_job_safe, run_licence_job, {})
    return jsonify({"data": {"status": "queued", "job": "verify-licences"}}), 202


@app.post("/publish")
def enqueue_publish() -> Any:
    logger.info("Queueing publish job")
    _executor.submit(_run_job_safe, run_publish_job, {})
    return jsonify({"data": {"status": "queued", "job": "publish"}}), 202


# ---------- Internals ----------


def _run_job_safe(job: Callable[..., Any], job_args: Dict[str, Any]) -> None:
    try:
        job(**job_args)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Job %s failed: %s", getattr(job, "__name__", job), exc)


def main() -> None:
    """Bind on PORT when the platform injects it, otherwise on WORKER_PORT."""
    env_port = os.getenv("PORT")
    port = int(env_port or get_settings().worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
