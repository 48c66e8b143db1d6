from flask import Flask, request, jsonify, g
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
import logging
import json
import time
import uuid
from dotenv import load_dotenv

from notes_rag import __version__ as APP_VERSION
from notes_rag.config import RAGConfig
from notes_rag.pipeline import build_response_generator, build_retriever

# Load environment variables from .env file
load_dotenv()

app = Flask(__name__)

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=log_level)
logger = logging.getLogger("backend")


@app.before_request
def _start_timer_and_request_id():
    g._start_time = time.time()
    g.request_id = str(uuid.uuid4())


@app.after_request
def _log_request(response):
    duration = int((time.time() - getattr(g, '_start_time', time.time())) * 1000)
    record = {
        "ts": time.strftime('%Y-%m-%dT%H:%M:%S', time.gmtime()) + f".{int((time.time()%1)*1000):03d}Z",
        "level": "INFO",
        "request_id": getattr(g, 'request_id', None),
        "method": request.method,
        "path": request.path,
        "status": response.status_code,
        "latency_ms": duration,
        "remote_addr": request.remote_addr,
        "user_agent": request.headers.get('User-Agent', '')[:200],
        "message": "request"
    }
    logger.info(json.dumps(record))
    return response


def _per_minute(env_name: str, default: int) -> int:
    try:
        return int(os.getenv(env_name, str(default)) or default)
    except ValueError:
        return default


ASK_PER_MIN = _per_minute("RATE_LIMIT_ASK_PER_MIN", 60)

limiter = Limiter(
    get_remote_address,
    app=app,
    default_limits=[],  # all explicit
    storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
)

CORS(app, resources={r"/*": {"origins": os.getenv("FRONTEND_ORIGIN", "http://localhost:5173")}})


@app.route("/health", methods=["GET"])
def health():
    """Liveness probe."""
    return jsonify({
        "status": "ok",
        "version": APP_VERSION
    }), 200


@app.route("/", methods=["GET"])
def index():
    return jsonify({
        "name": "class-notes-assistant",
        "version": APP_VERSION,
        "endpoints": [
            "/health",
            "/api/ask",
            "/rag/stats",
        ],
        "message": "Backend operational"
    }), 200


@app.route("/api/ask", methods=["POST"])
@app.route("/ask", methods=["POST"])
@limiter.limit(f"{max(ASK_PER_MIN, 1)} per minute", exempt_when=lambda: ASK_PER_MIN <= 0)
def ask():
    """Answer a question from the class notes.

    Expected JSON body:
    {
        "question": "<string>"
    }

    Pipeline failures are reported in the body with status "error",
    never as a transport error.
    """
    if not request.is_json:
        return jsonify({"status": "error", "answer": "Error: Content-Type must be application/json"}), 415

    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"status": "error", "answer": "Error: Request body must be a JSON object"}), 400

    question = data.get("question") or ""
    if not isinstance(question, str):
        return jsonify({"status": "error", "answer": "Error: 'question' must be a string"}), 400

    question = question.strip()
    if not question:
        return jsonify({"status": "error", "answer": "Error: 'question' is required and cannot be empty"}), 400

    logger.info(f"Received question: {question[:200]}")
    try:
        generator = build_response_generator(RAGConfig.from_env())
        answer = generator.answer(question)
    except Exception as e:
        logger.exception("Answering failed")
        return jsonify({"status": "error", "answer": f"Error: {e}"}), 200

    return jsonify({"status": "success", "answer": answer}), 200


@app.route("/rag/stats", methods=["GET"])
def rag_stats():
    """Return collection and retrieval statistics."""
    try:
        engine = build_retriever(RAGConfig.from_env())
        stats = engine.get_stats()
        return jsonify({"status": "ok", **stats}), 200
    except Exception as e:
        logger.exception("Stats failed")
        return jsonify({"status": "error", "message": str(e)}), 500


@app.errorhandler(404)
def not_found(_):
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(500)
def server_error(e):
    logger.exception("Unhandled server error")
    return jsonify({"error": "Internal server error"}), 500


if __name__ == "__main__":
    debug_enabled = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")
    app.run(port=int(os.getenv("PORT", "5000")), debug=debug_enabled, use_reloader=False)
