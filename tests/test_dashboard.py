import os
import sys
import tempfile
import time
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from careercoach.core.errors import DependencyUnavailable  # noqa: E402
from careercoach.quiz.catalog import fallback_categories, fallback_question_total  # noqa: E402
from careercoach.quiz.models import InterviewScore, UserProfile, UserProgress  # noqa: E402
from careercoach.quiz.recorder import AttemptRecorder  # noqa: E402
from careercoach.services.dashboard import CatalogStats, DashboardComposer  # noqa: E402
from careercoach.store.db import Store  # noqa: E402
from careercoach.store.seed import seed_quiz_data  # noqa: E402

NOW = datetime(2024, 6, 10, 15, 0, tzinfo=timezone.utc)


class SlowStore(Store):
    """Every read sleeps past the composer deadline."""

    def __init__(self, delay_s: float = 0.3):
        super().__init__(":memory:")
        self.delay_s = delay_s

    def _slow(self):
        time.sleep(self.delay_s)
        return None

    def category_profile(self):
        return self._slow()

    def list_difficulties(self):
        return self._slow()

    def list_attempts(self, user_id=None):
        return self._slow()

    def get_progress(self, user_id):
        return self._slow()

    def get_profile(self, user_id):
        return self._slow()


class BrokenStore(Store):
    def __init__(self):
        super().__init__(":memory:")

    def _broken(self, *args, **kwargs):
        raise DependencyUnavailable("connection refused")

    category_profile = _broken
    list_difficulties = _broken
    list_attempts = _broken
    get_progress = _broken
    get_profile = _broken


class DegradedDashboardTests(unittest.IsolatedAsyncioTestCase):
    def _assert_default(self, view):
        default = DashboardComposer.default_view()
        self.assertEqual(view, default)
        self.assertEqual(view.stats.resume_score, 75)
        self.assertEqual(view.stats.skills_count, 8)
        self.assertEqual(view.recent_activity, [])

    async def test_slow_store_yields_default_view(self):
        composer = DashboardComposer(SlowStore(), read_timeout_s=0.05, clock=lambda: NOW)
        started = time.monotonic()
        self._assert_default(await composer.dashboard(None))
        self._assert_default(await composer.dashboard("user-1"))
        self.assertLess(time.monotonic() - started, 1.0)

    async def test_dashboard_waits_one_read_timeout_not_one_per_read(self):
        composer = DashboardComposer(SlowStore(delay_s=0.5), read_timeout_s=0.1, clock=lambda: NOW)
        started = time.monotonic()
        self._assert_default(await composer.dashboard("user-1"))
        self.assertLess(time.monotonic() - started, 0.25)

    async def test_broken_store_yields_default_view(self):
        composer = DashboardComposer(BrokenStore(), read_timeout_s=0.5, clock=lambda: NOW)
        self._assert_default(await composer.dashboard(None))
        self._assert_default(await composer.dashboard("user-1"))

    async def test_categories_fall_back_to_catalog(self):
        composer = DashboardComposer(BrokenStore(), read_timeout_s=0.5)
        response = await composer.categories()
        self.assertTrue(response.success)
        self.assertEqual(response.total_categories, 7)
        self.assertEqual(response.categories[0].name, "JavaScript")
        self.assertEqual(response.categories[0].icon, "🟨")

    async def test_quiz_stats_use_neutral_average_without_attempts(self):
        composer = DashboardComposer(BrokenStore(), read_timeout_s=0.5, clock=lambda: NOW)
        stats = await composer.quiz_stats()
        self.assertEqual(stats.average_score, 85)
        self.assertEqual(stats.total_questions, fallback_question_total())
        self.assertEqual(stats.recent_quizzes, [])

    async def test_performance_degrades_to_zero(self):
        composer = DashboardComposer(BrokenStore(), read_timeout_s=0.5)
        performance = await composer.performance("user-1")
        self.assertEqual(performance.total_attempts, 0)
        self.assertEqual(performance.recent_scores, [])


class ComposeTests(unittest.TestCase):
    def setUp(self):
        self.composer = DashboardComposer(BrokenStore(), read_timeout_s=0.5, clock=lambda: NOW)
        self.catalog = CatalogStats(total_questions=24, categories=fallback_categories())

    def test_authenticated_average_and_recent_activity(self):
        scores = [
            InterviewScore(date=NOW - timedelta(days=6 - i), score=100 if i % 2 else 0, category="Python")
            for i in range(7)
        ]
        progress = UserProgress(resume_score=64, interview_scores=scores, total_quizzes_taken=7)
        profile = UserProfile(name="Ada", email="ada@example.com", skills=["Python", "SQL"])

        view = self.composer.compose_authenticated(progress, profile, self.catalog)

        self.assertEqual(view.stats.resume_score, 64)
        self.assertEqual(view.stats.total_quizzes, 7)
        self.assertEqual(view.stats.average_interview_score, 43)
        self.assertEqual(view.stats.skills_count, 2)
        self.assertEqual(view.stats.quiz_categories, 7)
        self.assertEqual(len(view.recent_activity), 5)
        self.assertEqual(view.recent_activity[0].date, "2024-06-10")
        self.assertEqual(view.recent_activity[0].type, "Python Quiz")
        self.assertEqual(view.quiz_overview.completed_today, 1)

    def test_authenticated_without_scores_reports_zero(self):
        view = self.composer.compose_authenticated(UserProgress(), None, self.catalog)
        self.assertEqual(view.stats.average_interview_score, 0)
        self.assertEqual(view.recent_activity, [])
        self.assertEqual(view.stats.skills_count, 0)

    def test_anonymous_uses_placeholders(self):
        view = self.composer.compose_anonymous([], self.catalog)
        self.assertEqual(view.stats.resume_score, 75)
        self.assertEqual(view.stats.skills_count, 8)
        self.assertEqual(view.stats.total_quizzes, 0)
        self.assertEqual(view.stats.available_questions, 24)


class LiveDashboardTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.store = Store(os.path.join(self.tmp_dir.name, "store.db"))
        self.store.open()
        seed_quiz_data(self.store)
        self.user_id = self.store.create_user(name="Ada", email="ada@example.com")
        self.composer = DashboardComposer(self.store, read_timeout_s=2.0, clock=lambda: NOW)

    def tearDown(self):
        self.store.close()
        self.tmp_dir.cleanup()

    async def test_dashboard_reflects_submissions(self):
        recorder = AttemptRecorder(self.store, clock=lambda: NOW)
        question = self.store.list_questions("Python", limit=1)[0]
        for selected in (question.correct_option_index, None, question.correct_option_index):
            await recorder.submit(self.user_id, question.id, selected, 10)

        view = await self.composer.dashboard(self.user_id)
        self.assertEqual(view.stats.total_quizzes, 3)
        self.assertEqual(view.stats.average_interview_score, 67)
        self.assertEqual(view.stats.available_questions, self.store.count_questions())

        user_stats = await self.composer.user_stats(self.user_id)
        self.assertEqual(user_stats.total_attempts, 3)
        self.assertEqual(user_stats.correct_answers, 2)
        self.assertEqual(user_stats.category_stats["Python"].total, 3)

        anonymous = await self.composer.dashboard(None)
        self.assertEqual(anonymous.stats.total_quizzes, 3)
        self.assertEqual(anonymous.quiz_overview.completed_today, 3)

    async def test_unknown_user_gets_default_view(self):
        view = await self.composer.dashboard("nobody")
        self.assertEqual(view, DashboardComposer.default_view())


if __name__ == "__main__":
    unittest.main()
