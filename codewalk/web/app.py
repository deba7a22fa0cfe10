"""Flask application serving the course API and the compile endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Flask, Response, jsonify, request

from codewalk.config import Config
from codewalk.models import parse_hints
from codewalk.playground import GoPlaygroundClient
from codewalk.web.db import DEFAULT_DB_PATH, close_db, get_db, init_db

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

_COURSE_COLUMNS = "id, title, description, instructor, duration, level, category, created_at, updated_at"


def create_app(config: Config | None = None, playground: GoPlaygroundClient | None = None) -> Flask:
    config = config or Config.from_env()
    app = Flask(__name__)
    app.config["DATABASE"] = config.db_path or str(DEFAULT_DB_PATH)
    app.teardown_appcontext(close_db)
    compiler = playground or GoPlaygroundClient(config.go_playground_url, timeout=config.request_timeout)

    with app.app_context():
        init_db()

    @app.before_request
    def handle_preflight():
        if request.method == "OPTIONS":
            return Response(status=200)
        return None

    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        response.headers.update(CORS_HEADERS)
        return response

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(exc):
        return jsonify({"error": "Method not allowed"}), 405

    @app.route("/api/courses")
    def list_courses():
        rows = get_db().execute(
            f"SELECT {_COURSE_COLUMNS}, "
            "(SELECT COUNT(*) FROM lessons l WHERE l.course_id = c.id) AS lessons_count "
            "FROM courses c ORDER BY created_at, id"
        ).fetchall()
        logger.debug("Listing %d courses", len(rows))
        return jsonify([dict(r) for r in rows])

    @app.route("/api/courses/<course_id>")
    def course_detail(course_id: str):
        db = get_db()
        row = db.execute(
            f"SELECT {_COURSE_COLUMNS}, "
            "(SELECT COUNT(*) FROM lessons l WHERE l.course_id = c.id) AS lessons_count "
            "FROM courses c WHERE id = ?",
            (course_id,),
        ).fetchone()
        if row is None:
            return jsonify({"error": "Course not found"}), 404
        lessons = db.execute(
            'SELECT id, title, description, "order" FROM lessons WHERE course_id = ? ORDER BY "order"',
            (course_id,),
        ).fetchall()
        return jsonify({**dict(row), "lessons": [dict(lesson) for lesson in lessons]})

    @app.route("/api/courses/<course_id>/lessons/<lesson_id>")
    def lesson_detail(course_id: str, lesson_id: str):
        row = get_db().execute(
            "SELECT * FROM lessons WHERE course_id = ? AND id = ?", (course_id, lesson_id)
        ).fetchone()
        if row is None:
            return jsonify({"error": "Lesson not found"}), 404
        lesson = dict(row)
        lesson["hints"] = parse_hints(lesson.get("hints"))
        return jsonify(lesson)

    @app.route("/api/compile", methods=["POST"])
    def compile_code():
        data = request.get_json(silent=True) or {}
        code = data.get("code") or ""
        if not code.strip():
            return jsonify({"error": "Code is required"}), 400
        logger.info("Compiling %d chars of code", len(code))
        outcome = compiler.compile_and_run(code)
        return jsonify(outcome.to_dict())

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})

    return app
