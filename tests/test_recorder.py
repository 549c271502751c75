import os
import sys
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from careercoach.core.errors import DependencyUnavailable, NotFoundError  # noqa: E402
from careercoach.quiz.recorder import AttemptRecorder  # noqa: E402
from careercoach.store.db import Store  # noqa: E402
from careercoach.store.seed import seed_quiz_data  # noqa: E402

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FlakyProgressStore(Store):
    def record_quiz_progress(self, user_id, entry):
        raise DependencyUnavailable("progress write timed out")


class AttemptRecorderTests(unittest.IsolatedAsyncioTestCase):
    store_class = Store

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.store = self.store_class(os.path.join(self.tmp_dir.name, "store.db"))
        self.store.open()
        seed_quiz_data(self.store)
        self.question = self.store.list_questions("JavaScript", limit=1)[0]
        self.user_id = self.store.create_user(name="Ada", email="ada@example.com")
        self.recorder = AttemptRecorder(self.store, clock=lambda: FIXED_NOW)

    def tearDown(self):
        self.store.close()
        self.tmp_dir.cleanup()

    async def test_correct_answer_updates_progress(self):
        result = await self.recorder.submit(self.user_id, self.question.id, self.question.correct_option_index, 12)
        self.assertTrue(result.is_correct)
        self.assertEqual(result.correct_option_index, self.question.correct_option_index)
        self.assertTrue(result.progress_updated)

        progress = self.store.get_progress(self.user_id)
        self.assertEqual(progress.total_quizzes_taken, 1)
        self.assertEqual(progress.interview_scores[-1].score, 100)
        self.assertEqual(progress.interview_scores[-1].category, "JavaScript")

        attempts = self.store.list_attempts(self.user_id)
        self.assertEqual(len(attempts), 1)
        self.assertEqual(attempts[0].submitted_at, FIXED_NOW)

    async def test_wrong_missing_and_out_of_range_answers_are_incorrect(self):
        wrong = (self.question.correct_option_index + 1) % len(self.question.options)
        for selected in (wrong, None, 99, -1):
            result = await self.recorder.submit(self.user_id, self.question.id, selected, None)
            self.assertFalse(result.is_correct)
        progress = self.store.get_progress(self.user_id)
        self.assertEqual(progress.total_quizzes_taken, 4)
        self.assertTrue(all(entry.score == 0 for entry in progress.interview_scores))

    async def test_unknown_question_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            await self.recorder.submit(self.user_id, "does-not-exist", 0, 5)
        self.assertEqual(self.store.list_attempts(), [])

    async def test_anonymous_submission_records_attempt_only(self):
        result = await self.recorder.submit(None, self.question.id, 0, 3)
        self.assertFalse(result.progress_updated)
        attempts = self.store.list_attempts()
        self.assertEqual(len(attempts), 1)
        self.assertIsNone(attempts[0].user_id)
        self.assertEqual(self.store.get_progress(self.user_id).total_quizzes_taken, 0)

    async def test_submission_for_unknown_user_keeps_attempt(self):
        result = await self.recorder.submit("ghost", self.question.id, 0, 3)
        self.assertFalse(result.progress_updated)
        self.assertEqual(len(self.store.list_attempts("ghost")), 1)


class ProgressFailureTests(AttemptRecorderTests):
    store_class = FlakyProgressStore

    async def test_correct_answer_updates_progress(self):
        result = await self.recorder.submit(self.user_id, self.question.id, self.question.correct_option_index, 12)
        self.assertTrue(result.is_correct)
        self.assertFalse(result.progress_updated)
        self.assertEqual(len(self.store.list_attempts(self.user_id)), 1)
        self.assertEqual(self.store.get_progress(self.user_id).total_quizzes_taken, 0)

    async def test_wrong_missing_and_out_of_range_answers_are_incorrect(self):
        result = await self.recorder.submit(self.user_id, self.question.id, None, None)
        self.assertFalse(result.is_correct)
        self.assertEqual(self.store.get_progress(self.user_id).total_quizzes_taken, 0)


if __name__ == "__main__":
    unittest.main()
