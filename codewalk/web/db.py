"""SQLite database helpers for the course API."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from flask import current_app, g

from codewalk.samples import FIBONACCI, HELLO, LOOP

DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent.parent / "instance" / "codewalk.db"

SCHEMA = """
CREATE TABLE IF NOT EXISTS courses (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    instructor TEXT NOT NULL DEFAULT '',
    duration INTEGER NOT NULL DEFAULT 0,
    level TEXT NOT NULL DEFAULT 'beginner',
    category TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS lessons (
    id TEXT NOT NULL,
    course_id TEXT NOT NULL REFERENCES courses(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT,
    content TEXT NOT NULL DEFAULT '',
    code TEXT NOT NULL DEFAULT '',
    hints TEXT,
    expected_output TEXT,
    "order" INTEGER NOT NULL,
    PRIMARY KEY (course_id, id),
    UNIQUE (course_id, "order")
);
"""

SEED_COURSES = [
    {
        "id": "go-basics",
        "title": "Go Basics",
        "description": "Core Go concepts: variables, types, functions and control flow",
        "instructor": "Zhang San",
        "duration": 12,
        "level": "beginner",
        "category": "programming",
        "created_at": "2024-01-15T00:00:00Z",
    },
    {
        "id": "web-development",
        "title": "Introduction to Web Development",
        "description": "Build modern websites with HTML, CSS and JavaScript",
        "instructor": "Li Si",
        "duration": 20,
        "level": "beginner",
        "category": "web",
        "created_at": "2024-01-20T00:00:00Z",
    },
    {
        "id": "data-structures",
        "title": "Data Structures and Algorithms",
        "description": "Common data structures and the design of algorithms",
        "instructor": "Wang Wu",
        "duration": 30,
        "level": "intermediate",
        "category": "computer-science",
        "created_at": "2024-02-01T00:00:00Z",
    },
    {
        "id": "database-design",
        "title": "Database Design Principles",
        "description": "Relational schema design and SQL query optimization",
        "instructor": "Zhao Liu",
        "duration": 15,
        "level": "intermediate",
        "category": "database",
        "created_at": "2024-02-10T00:00:00Z",
    },
]

# Orders are spaced out on purpose; lessons are traversed by position, not by order arithmetic.
SEED_LESSONS = [
    {
        "id": HELLO.name,
        "course_id": "go-basics",
        "title": "Hello, World",
        "description": "Your first Go program",
        "content": "# Hello, World\n\nEvery Go program starts in `package main` with a `main` function.",
        "code": HELLO.code,
        "hints": json.dumps(["Use fmt.Println to print a line.", "Println adds the trailing newline for you."]),
        "expected_output": HELLO.expected_output,
        "order": 10,
    },
    {
        "id": LOOP.name,
        "course_id": "go-basics",
        "title": "Loops",
        "description": "Counting with for",
        "content": "# Loops\n\nGo has a single looping keyword: `for`.",
        "code": LOOP.code,
        "hints": json.dumps(["The loop runs while i <= 5.", "Print Done! after the loop ends."]),
        "expected_output": LOOP.expected_output,
        "order": 20,
    },
    {
        "id": FIBONACCI.name,
        "course_id": "go-basics",
        "title": "Recursion",
        "description": "The Fibonacci sequence",
        "content": "# Recursion\n\nA function may call itself as long as it has a base case.",
        "code": FIBONACCI.code,
        "hints": json.dumps(["fibonacci(0) is 0 and fibonacci(1) is 1."]),
        "expected_output": FIBONACCI.expected_output,
        "order": 30,
    },
]


def get_db() -> sqlite3.Connection:
    """Return a per-request database connection stored on Flask *g*."""
    if "db" not in g:
        path = Path(current_app.config["DATABASE"])
        path.parent.mkdir(parents=True, exist_ok=True)
        g.db = sqlite3.connect(str(path))
        g.db.row_factory = sqlite3.Row
        g.db.execute("PRAGMA foreign_keys = ON")
    return g.db


def close_db(exc=None):
    """Close the database connection at the end of a request."""
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db(seed: bool = True):
    """Create tables if they don't exist and seed an empty database."""
    db = get_db()
    db.executescript(SCHEMA)
    db.commit()
    if seed and db.execute("SELECT COUNT(*) AS cnt FROM courses").fetchone()["cnt"] == 0:
        seed_db(db)


def seed_db(db: sqlite3.Connection) -> None:
    for course in SEED_COURSES:
        db.execute(
            """INSERT INTO courses (id, title, description, instructor, duration, level, category, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                course["id"], course["title"], course["description"], course["instructor"],
                course["duration"], course["level"], course["category"],
                course["created_at"], course["created_at"],
            ),
        )
    for lesson in SEED_LESSONS:
        db.execute(
            """INSERT INTO lessons (id, course_id, title, description, content, code, hints, expected_output, "order")
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                lesson["id"], lesson["course_id"], lesson["title"], lesson["description"],
                lesson["content"], lesson["code"], lesson["hints"], lesson["expected_output"],
                lesson["order"],
            ),
        )
    db.commit()
