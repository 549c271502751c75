import json
import os
import sys
import tempfile
import unittest
from io import BytesIO
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep API tests deterministic: no rate limiting, no AI calls, no simulated delay.
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("RESUME_ANALYSIS_DELAY_S", "0")
os.environ.setdefault("SEED_ON_STARTUP", "0")
os.environ.setdefault("JWT_SECRET", "test-only-signing-key-0123456789abcdef")

import jwt  # noqa: E402
from docx import Document  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from careercoach.api.deps import (  # noqa: E402
    get_cover_letter_writer,
    get_dashboard_composer,
    get_read_store,
    get_resume_scorer,
    get_store,
)
from careercoach.core.config import settings  # noqa: E402
from careercoach.main import app  # noqa: E402
from careercoach.services.cover_letter import CoverLetterWriter  # noqa: E402
from careercoach.services.dashboard import DashboardComposer  # noqa: E402
from careercoach.services.resume_scorer import ResumeScorer  # noqa: E402
from careercoach.store.db import Store  # noqa: E402
from careercoach.store.seed import seed_quiz_data  # noqa: E402

from test_dashboard import BrokenStore, SlowStore  # noqa: E402


def _token(user_id: str) -> str:
    return jwt.encode({"userId": user_id}, settings.jwt_secret, algorithm=settings.jwt_algorithm)


class StaticAIClient:
    def __init__(self, reply: str):
        self.reply = reply
        self.messages = []

    async def complete(self, messages):
        self.messages.append(messages)
        return self.reply

    async def close(self):
        return None


def _docx_bytes(*paragraphs: str) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class CareerCoachApiTests(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.store = Store(os.path.join(self.tmp_dir.name, "api.db"))
        self.store.open()
        seed_quiz_data(self.store)
        self.user_id = self.store.create_user(name="Ada Lovelace", email="ada@example.com")
        self.auth = {"Authorization": f"Bearer {_token(self.user_id)}"}

        app.dependency_overrides[get_store] = lambda: self.store
        app.dependency_overrides[get_read_store] = lambda: self.store
        app.dependency_overrides[get_dashboard_composer] = lambda: DashboardComposer(self.store, read_timeout_s=2.0)
        app.dependency_overrides[get_resume_scorer] = lambda: ResumeScorer(None, timeout_s=1.0)
        app.dependency_overrides[get_cover_letter_writer] = lambda: CoverLetterWriter(None, timeout_s=1.0)
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.store.close()
        self.tmp_dir.cleanup()

    def _question(self, category: str = "JavaScript"):
        return self.store.list_questions(category, limit=1)[0]

    def test_routes_are_mounted_under_api(self):
        paths = set(app.openapi()["paths"])
        for path in (
            "/api/health",
            "/api/quiz/categories",
            "/api/quiz/stats",
            "/api/quiz/stats/user",
            "/api/quiz/submit",
            "/api/quiz/{category}",
            "/api/interview/performance",
            "/api/user/dashboard",
            "/api/user/profile",
            "/api/resume/upload",
            "/api/resume/history",
            "/api/skills/demand",
            "/api/skills/cover-letter",
            "/api/skills/career-tips",
        ):
            self.assertIn(path, paths)

    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_submit_correct_answer_then_dashboard(self):
        question = self._question()
        response = self.client.post(
            "/api/quiz/submit",
            json={"quizId": question.id, "selectedAnswer": question.correct_option_index, "timeSpent": 20},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["isCorrect"])
        self.assertEqual(body["correctAnswer"], question.correct_option_index)
        self.assertEqual(body["correctOptionIndex"], question.correct_option_index)
        self.assertEqual(body["explanation"], question.explanation)

        dashboard = self.client.get("/api/user/dashboard", headers=self.auth).json()
        self.assertEqual(dashboard["stats"]["totalQuizzes"], 1)
        self.assertEqual(dashboard["stats"]["averageInterviewScore"], 100)
        self.assertEqual(dashboard["recentActivity"][0]["type"], "JavaScript Quiz")

    def test_counter_matches_number_of_submissions(self):
        question = self._question("Python")
        for selected in (0, 1, 2, None, question.correct_option_index):
            response = self.client.post(
                "/api/quiz/submit",
                json={"quizId": question.id, "selectedAnswer": selected, "timeSpent": 5},
                headers=self.auth,
            )
            self.assertEqual(response.status_code, 200)

        progress = self.store.get_progress(self.user_id)
        self.assertEqual(progress.total_quizzes_taken, 5)
        self.assertEqual(len(progress.interview_scores), 5)

        user_stats = self.client.get("/api/quiz/stats/user", headers=self.auth).json()
        self.assertEqual(user_stats["totalAttempts"], 5)
        self.assertEqual(user_stats["categoryStats"]["Python"]["total"], 5)

        performance = self.client.get("/api/interview/performance", headers=self.auth).json()
        self.assertEqual(len(performance["recentScores"]), 5)
        self.assertIn("Python", performance["categoryWise"])

    def test_anonymous_submission_is_recorded(self):
        question = self._question()
        response = self.client.post("/api/quiz/submit", json={"quizId": question.id, "selectedAnswer": 3})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(self.store.list_attempts()), 1)
        self.assertEqual(self.store.get_progress(self.user_id).total_quizzes_taken, 0)

        stats = self.client.get("/api/quiz/stats").json()
        self.assertEqual(len(stats["recentQuizzes"]), 1)
        self.assertIn(stats["averageScore"], (0, 100))

    def test_submit_unknown_question_is_404(self):
        response = self.client.post(
            "/api/quiz/submit",
            json={"quizId": "missing", "selectedAnswer": 0},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Quiz not found")

    def test_submit_invalid_body_is_400(self):
        response = self.client.post("/api/quiz/submit", json={"selectedAnswer": 0}, headers=self.auth)
        self.assertEqual(response.status_code, 400)
        self.assertIn("message", response.json())

    def test_quiz_stats_without_attempts_uses_neutral_average(self):
        body = self.client.get("/api/quiz/stats").json()
        self.assertTrue(body["success"])
        self.assertEqual(body["averageScore"], 85)
        self.assertEqual(body["totalQuestions"], self.store.count_questions())

    def test_question_listing_hides_answers(self):
        response = self.client.get("/api/quiz/React", params={"limit": 2})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertLessEqual(body["count"], 2)
        for question in body["questions"]:
            self.assertNotIn("correctOptionIndex", question)
            self.assertNotIn("explanation", question)
            self.assertEqual(question["category"], "React")

    def test_categories_fall_back_when_store_fails(self):
        app.dependency_overrides[get_dashboard_composer] = lambda: DashboardComposer(BrokenStore(), read_timeout_s=0.5)
        body = self.client.get("/api/quiz/categories").json()
        self.assertEqual(body["totalCategories"], 7)
        self.assertEqual(body["categories"][0]["icon"], "🟨")

    def test_dashboard_is_200_when_store_is_slow(self):
        app.dependency_overrides[get_dashboard_composer] = lambda: DashboardComposer(SlowStore(), read_timeout_s=0.05)
        for headers in ({}, self.auth):
            response = self.client.get("/api/user/dashboard", headers=headers)
            self.assertEqual(response.status_code, 200)
            stats = response.json()["stats"]
            self.assertEqual(stats["resumeScore"], 75)
            self.assertEqual(stats["skillsCount"], 8)

    def test_invalid_token_on_optional_route_is_anonymous(self):
        response = self.client.get("/api/user/dashboard", headers={"Authorization": "Bearer not-a-token"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["stats"]["resumeScore"], 75)

    def test_required_auth_routes_reject_missing_token(self):
        for path in (
            "/api/user/profile",
            "/api/interview/performance",
            "/api/resume/history",
            "/api/quiz/stats/user",
            "/api/skills/career-tips",
        ):
            response = self.client.get(path)
            self.assertEqual(response.status_code, 401)
            self.assertIn("message", response.json())

    def test_resume_upload_without_ai_key_uses_fallback(self):
        content = _docx_bytes("Ada Lovelace", "Software engineer with " + "Python experience. " * 60)
        response = self.client.post(
            "/api/resume/upload",
            files={"file": ("resume.docx", content, "application/vnd.openxmlformats-officedocument.wordprocessingml.document")},
            data={"jobDescription": "We use React, AWS and Docker"},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertGreaterEqual(body["atsScore"], 75)
        self.assertLessEqual(body["atsScore"], 94)
        self.assertEqual(body["missingKeywords"], ["react", "aws", "docker"])
        self.assertEqual(body["source"], "fallback")
        self.assertTrue(body["hasJobDescription"])
        self.assertTrue(body["resumeText"].endswith("..."))
        self.assertEqual(len(body["resumeText"]), 503)

        history = self.client.get("/api/resume/history", headers=self.auth).json()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["atsScore"], body["atsScore"])
        self.assertEqual(self.store.get_progress(self.user_id).resume_score, body["atsScore"])

    def test_resume_upload_rejects_unsupported_type(self):
        response = self.client.post(
            "/api/resume/upload",
            files={"file": ("resume.txt", b"plain text resume", "text/plain")},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Only PDF and DOCX files are allowed")

    def test_resume_upload_rejects_mismatched_content(self):
        response = self.client.post(
            "/api/resume/upload",
            files={"file": ("resume.pdf", b"not really a pdf", "application/pdf")},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 400)

    def test_profile_update_accepts_whitelisted_fields(self):
        response = self.client.put(
            "/api/user/profile",
            json={"location": "London", "targetRole": "Staff Engineer", "skills": ["Python", "Math"]},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["location"], "London")
        self.assertEqual(body["targetRole"], "Staff Engineer")
        self.assertEqual(body["email"], "ada@example.com")

        dashboard = self.client.get("/api/user/dashboard", headers=self.auth).json()
        self.assertEqual(dashboard["stats"]["skillsCount"], 2)

    def test_profile_update_rejects_unknown_fields(self):
        response = self.client.put(
            "/api/user/profile",
            json={"email": "attacker@example.com", "progress": {"resumeScore": 100}},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 400)
        profile = self.client.get("/api/user/profile", headers=self.auth).json()
        self.assertEqual(profile["email"], "ada@example.com")

    def test_skills_demand(self):
        body = self.client.get("/api/skills/demand").json()
        self.assertTrue(body["success"])
        self.assertEqual(body["totalJobs"], sum(skill["jobs"] for skill in body["skills"]))


    def test_token_signed_with_a_guessable_key_is_rejected(self):
        forged = jwt.encode(
            {"userId": self.user_id},
            "dev-only-insecure-secret-change-me-in-production",
            algorithm=settings.jwt_algorithm,
        )
        response = self.client.get("/api/user/profile", headers={"Authorization": f"Bearer {forged}"})
        self.assertEqual(response.status_code, 401)

    def test_cover_letter_without_ai_uses_template(self):
        response = self.client.post(
            "/api/skills/cover-letter",
            json={"jobTitle": "Backend Engineer", "company": "Acme"},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["source"], "fallback")
        self.assertIn("Backend Engineer position at Acme", body["coverLetter"])
        self.assertTrue(body["coverLetter"].endswith("Best regards,\nAda Lovelace"))
        self.assertIn("generatedAt", body)

    def test_cover_letter_uses_ai_reply_and_stored_profile(self):
        client = StaticAIClient(json.dumps({"coverLetter": "Dear Acme team, hire me."}))
        app.dependency_overrides[get_cover_letter_writer] = lambda: CoverLetterWriter(client, timeout_s=1.0)
        response = self.client.post(
            "/api/skills/cover-letter",
            json={"jobTitle": "Backend Engineer", "company": "Acme", "jobDescription": "Python APIs"},
            headers=self.auth,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["source"], "ai")
        self.assertEqual(body["coverLetter"], "Dear Acme team, hire me.")
        prompt = client.messages[0][-1].content
        self.assertIn("Ada Lovelace", prompt)
        self.assertNotIn("ada@example.com", prompt)

    def test_cover_letter_requires_auth_and_fields(self):
        response = self.client.post("/api/skills/cover-letter", json={"jobTitle": "Engineer", "company": "Acme"})
        self.assertEqual(response.status_code, 401)
        response = self.client.post("/api/skills/cover-letter", json={"jobTitle": "Engineer"}, headers=self.auth)
        self.assertEqual(response.status_code, 400)

    def test_career_tips_are_personalized(self):
        response = self.client.get("/api/skills/career-tips", headers=self.auth)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body["tips"]), 5)
        self.assertEqual(body["tips"][0], "Focus on learning in-demand skills like React, Python, and AWS")
        self.assertEqual(body["personalizedFor"], "Ada Lovelace")

if __name__ == "__main__":
    unittest.main()
