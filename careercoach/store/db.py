from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator

from careercoach.core.errors import DependencyUnavailable, NotFoundError, ValidationError
from careercoach.quiz.models import (
    InterviewScore,
    QuizAttempt,
    QuizQuestion,
    ResumeHistoryEntry,
    UserProfile,
    UserProgress,
)

logger = logging.getLogger(__name__)

_DIFFICULTY_RANK = "CASE difficulty WHEN 'Easy' THEN 0 WHEN 'Medium' THEN 1 WHEN 'Hard' THEN 2 ELSE 3 END"

_PROFILE_FIELDS = ("avatar", "phone", "location", "experience", "current_role", "target_role", "skills")

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS quiz_questions (
        id TEXT PRIMARY KEY,
        category TEXT NOT NULL,
        difficulty TEXT NOT NULL,
        prompt TEXT NOT NULL,
        options_json TEXT NOT NULL,
        correct_option_index INTEGER NOT NULL,
        explanation TEXT,
        tags_json TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_quiz_questions_category
    ON quiz_questions (category, difficulty);
    """,
    """
    CREATE TABLE IF NOT EXISTS quiz_attempts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT,
        question_id TEXT NOT NULL,
        selected_option_index INTEGER,
        is_correct INTEGER NOT NULL,
        time_spent_seconds REAL,
        category TEXT NOT NULL,
        submitted_at TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_quiz_attempts_user
    ON quiz_attempts (user_id, id);
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        profile_json TEXT NOT NULL,
        resume_score INTEGER NOT NULL DEFAULT 0,
        total_quizzes_taken INTEGER NOT NULL DEFAULT 0,
        skills_improved_json TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS interview_scores (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        recorded_at TEXT NOT NULL,
        score INTEGER NOT NULL,
        category TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS resume_history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        filename TEXT NOT NULL,
        upload_date TEXT NOT NULL,
        ats_score INTEGER NOT NULL,
        suggestions_json TEXT NOT NULL
    );
    """,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Store:
    """SQLite-backed store client shared by every request.

    One connection guarded by a lock; each method is a blocking call meant to
    run in a worker thread. Multi-row writes that must land together use a
    single IMMEDIATE transaction.
    """

    def __init__(self, path: str):
        self._path = path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def open(self) -> None:
        with self._lock:
            if self._conn is not None:
                return
            if self._path != ":memory:":
                directory = os.path.dirname(self._path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
            try:
                conn = sqlite3.connect(
                    self._path,
                    check_same_thread=False,
                    timeout=5,
                    isolation_level=None,
                )
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.execute("PRAGMA synchronous=NORMAL;")
                conn.execute("PRAGMA busy_timeout=5000;")
                for statement in _SCHEMA:
                    conn.execute(statement)
            except sqlite3.Error as exc:
                raise DependencyUnavailable(f"Store could not be opened: {exc}") from exc
            self._conn = conn
            logger.info("store_opened path=%s", self._path)

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
            logger.info("store_closed path=%s", self._path)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            if self._conn is None:
                raise DependencyUnavailable("Store is not connected.")
            try:
                yield self._conn
            except sqlite3.IntegrityError as exc:
                raise ValidationError(f"Conflicting record: {exc}") from exc
            except sqlite3.Error as exc:
                raise DependencyUnavailable(f"Store operation failed: {exc}") from exc

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._cursor() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def ping(self) -> bool:
        with self._cursor() as conn:
            conn.execute("SELECT 1").fetchone()
        return True

    # Questions

    def insert_questions(self, questions: Iterable[QuizQuestion]) -> int:
        created_at = _utc_now().isoformat()
        rows = [
            (
                q.id,
                q.category,
                q.difficulty,
                q.prompt,
                json.dumps(q.options, ensure_ascii=False),
                q.correct_option_index,
                q.explanation,
                json.dumps(q.tags, ensure_ascii=False),
                created_at,
            )
            for q in questions
        ]
        with self._transaction() as conn:
            conn.executemany(
                """
                INSERT OR IGNORE INTO quiz_questions (
                    id, category, difficulty, prompt, options_json,
                    correct_option_index, explanation, tags_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        return len(rows)

    def get_question(self, question_id: str) -> QuizQuestion | None:
        with self._cursor() as conn:
            row = conn.execute(
                """
                SELECT id, category, difficulty, prompt, options_json,
                       correct_option_index, explanation, tags_json
                FROM quiz_questions WHERE id = ?
                """,
                (question_id,),
            ).fetchone()
        return self._row_to_question(row) if row else None

    def list_questions(self, category: str, difficulty: str | None = None, limit: int = 10) -> list[QuizQuestion]:
        query = """
            SELECT id, category, difficulty, prompt, options_json,
                   correct_option_index, explanation, tags_json
            FROM quiz_questions WHERE category = ?
        """
        params: list[Any] = [category]
        if difficulty:
            query += " AND difficulty = ?"
            params.append(difficulty)
        query += " ORDER BY rowid LIMIT ?"
        params.append(limit)
        with self._cursor() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_question(row) for row in rows]

    def count_questions(self) -> int:
        with self._cursor() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM quiz_questions").fetchone()[0])

    def list_difficulties(self) -> list[str]:
        with self._cursor() as conn:
            rows = conn.execute(
                f"SELECT difficulty FROM quiz_questions GROUP BY difficulty ORDER BY {_DIFFICULTY_RANK}, difficulty"
            ).fetchall()
        return [row[0] for row in rows]

    def category_profile(self) -> list[tuple[str, int, list[str]]]:
        """Return (category, question count, difficulties) for every stored category."""
        with self._cursor() as conn:
            rows = conn.execute(
                f"""
                SELECT category, difficulty, COUNT(*)
                FROM quiz_questions
                GROUP BY category, difficulty
                ORDER BY category, {_DIFFICULTY_RANK}, difficulty
                """
            ).fetchall()
        profile: dict[str, tuple[int, list[str]]] = {}
        for category, difficulty, count in rows:
            total, difficulties = profile.get(category, (0, []))
            difficulties.append(difficulty)
            profile[category] = (total + int(count), difficulties)
        return [(category, total, difficulties) for category, (total, difficulties) in profile.items()]

    @staticmethod
    def _row_to_question(row: tuple) -> QuizQuestion:
        return QuizQuestion(
            id=row[0],
            category=row[1],
            difficulty=row[2],
            prompt=row[3],
            options=json.loads(row[4]),
            correct_option_index=row[5],
            explanation=row[6],
            tags=json.loads(row[7]) if row[7] else [],
        )

    # Attempts

    def insert_attempt(self, attempt: QuizAttempt) -> QuizAttempt:
        with self._cursor() as conn:
            cur = conn.execute(
                """
                INSERT INTO quiz_attempts (
                    user_id, question_id, selected_option_index, is_correct,
                    time_spent_seconds, category, submitted_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    attempt.user_id,
                    attempt.question_id,
                    attempt.selected_option_index,
                    1 if attempt.is_correct else 0,
                    attempt.time_spent_seconds,
                    attempt.category,
                    attempt.submitted_at.isoformat(),
                ),
            )
            attempt_id = cur.lastrowid
        return attempt.model_copy(update={"id": attempt_id})

    def list_attempts(self, user_id: str | None = None) -> list[QuizAttempt]:
        """Attempts in insertion order, optionally for one user."""
        query = """
            SELECT id, user_id, question_id, selected_option_index, is_correct,
                   time_spent_seconds, category, submitted_at
            FROM quiz_attempts
        """
        params: tuple[Any, ...] = ()
        if user_id is not None:
            query += " WHERE user_id = ?"
            params = (user_id,)
        query += " ORDER BY id ASC"
        with self._cursor() as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            QuizAttempt(
                id=row[0],
                user_id=row[1],
                question_id=row[2],
                selected_option_index=row[3],
                is_correct=bool(row[4]),
                time_spent_seconds=row[5],
                category=row[6],
                submitted_at=_parse_dt(row[7]),
            )
            for row in rows
        ]

    # Users

    def create_user(self, *, name: str, email: str, user_id: str | None = None) -> str:
        new_id = user_id or uuid.uuid4().hex
        profile = {field: None for field in _PROFILE_FIELDS}
        profile["skills"] = []
        with self._cursor() as conn:
            conn.execute(
                """
                INSERT INTO users (id, name, email, profile_json, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (new_id, name.strip(), email.strip().lower(), json.dumps(profile), _utc_now().isoformat()),
            )
        return new_id

    def get_profile(self, user_id: str) -> UserProfile | None:
        with self._cursor() as conn:
            row = conn.execute(
                "SELECT name, email, profile_json FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
        if not row:
            return None
        profile = json.loads(row[2]) if row[2] else {}
        return UserProfile(name=row[0], email=row[1], **profile)

    def update_profile(self, user_id: str, changes: dict[str, Any]) -> UserProfile:
        unknown = set(changes) - set(_PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported profile fields: {', '.join(sorted(unknown))}")
        with self._transaction() as conn:
            row = conn.execute("SELECT profile_json FROM users WHERE id = ?", (user_id,)).fetchone()
            if not row:
                raise NotFoundError("User not found")
            profile = json.loads(row[0]) if row[0] else {}
            profile.update(changes)
            conn.execute(
                "UPDATE users SET profile_json = ? WHERE id = ?",
                (json.dumps(profile, ensure_ascii=False), user_id),
            )
        updated = self.get_profile(user_id)
        if updated is None:
            raise NotFoundError("User not found")
        return updated

    def get_progress(self, user_id: str) -> UserProgress | None:
        with self._cursor() as conn:
            row = conn.execute(
                """
                SELECT resume_score, total_quizzes_taken, skills_improved_json
                FROM users WHERE id = ?
                """,
                (user_id,),
            ).fetchone()
            if not row:
                return None
            score_rows = conn.execute(
                """
                SELECT recorded_at, score, category
                FROM interview_scores WHERE user_id = ?
                ORDER BY id ASC
                """,
                (user_id,),
            ).fetchall()
        return UserProgress(
            resume_score=row[0],
            total_quizzes_taken=row[1],
            skills_improved=json.loads(row[2]) if row[2] else [],
            interview_scores=[
                InterviewScore(date=_parse_dt(recorded_at), score=score, category=category)
                for recorded_at, score, category in score_rows
            ],
        )

    def record_quiz_progress(self, user_id: str, entry: InterviewScore) -> None:
        """Increment the quiz counter and append one interview score atomically."""
        with self._transaction() as conn:
            cur = conn.execute(
                "UPDATE users SET total_quizzes_taken = total_quizzes_taken + 1 WHERE id = ?",
                (user_id,),
            )
            if cur.rowcount == 0:
                raise NotFoundError("User not found")
            conn.execute(
                """
                INSERT INTO interview_scores (user_id, recorded_at, score, category)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, entry.date.isoformat(), entry.score, entry.category),
            )

    # Resumes

    def append_resume_history(self, user_id: str, entry: ResumeHistoryEntry) -> None:
        with self._transaction() as conn:
            cur = conn.execute(
                "UPDATE users SET resume_score = ? WHERE id = ?",
                (entry.ats_score, user_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError("User not found")
            conn.execute(
                """
                INSERT INTO resume_history (user_id, filename, upload_date, ats_score, suggestions_json)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    entry.filename,
                    entry.upload_date.isoformat(),
                    entry.ats_score,
                    json.dumps(entry.suggestions, ensure_ascii=False),
                ),
            )

    def list_resume_history(self, user_id: str) -> list[ResumeHistoryEntry]:
        with self._cursor() as conn:
            rows = conn.execute(
                """
                SELECT filename, upload_date, ats_score, suggestions_json
                FROM resume_history WHERE user_id = ?
                ORDER BY id ASC
                """,
                (user_id,),
            ).fetchall()
        return [
            ResumeHistoryEntry(
                filename=row[0],
                upload_date=_parse_dt(row[1]),
                ats_score=row[2],
                suggestions=json.loads(row[3]) if row[3] else [],
            )
            for row in rows
        ]
