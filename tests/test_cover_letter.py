import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from careercoach.services.cover_letter import CoverLetterWriter, build_messages, template_letter  # noqa: E402

from test_resume_scorer import FakeAIClient  # noqa: E402

PROFILE = {"name": "Grace Hopper", "skills": ["COBOL", "Compilers"]}


class CoverLetterWriterTests(unittest.IsolatedAsyncioTestCase):
    async def test_ai_letter_is_used(self):
        client = FakeAIClient(json.dumps({"coverLetter": "  Dear team,\n\nI build compilers.  "}))
        letter = await CoverLetterWriter(client, timeout_s=1.0).write("Engineer", "Navy", "Compilers", PROFILE)
        self.assertEqual(letter.source, "ai")
        self.assertEqual(letter.cover_letter, "Dear team,\n\nI build compilers.")
        self.assertEqual(client.calls, 1)

    async def test_missing_client_uses_template(self):
        letter = await CoverLetterWriter(None, timeout_s=1.0).write("Engineer", "Navy", None, PROFILE)
        self.assertEqual(letter.source, "fallback")
        self.assertEqual(letter.cover_letter, template_letter("Engineer", "Navy", PROFILE))

    async def test_timeout_uses_template(self):
        client = FakeAIClient(json.dumps({"coverLetter": "late"}), delay_s=0.5)
        letter = await CoverLetterWriter(client, timeout_s=0.05).write("Engineer", "Navy")
        self.assertEqual(letter.source, "fallback")

    async def test_ai_error_uses_template(self):
        client = FakeAIClient(error=RuntimeError("upstream 500"))
        letter = await CoverLetterWriter(client, timeout_s=1.0).write("Engineer", "Navy")
        self.assertEqual(letter.source, "fallback")

    async def test_unparseable_or_blank_reply_uses_template(self):
        for reply in ("Here is your letter: Dear...", json.dumps({"coverLetter": "   "}), json.dumps({"letter": "x"})):
            letter = await CoverLetterWriter(FakeAIClient(reply), timeout_s=1.0).write("Engineer", "Navy")
            self.assertEqual(letter.source, "fallback", reply)


class CoverLetterPromptTests(unittest.TestCase):
    def test_template_signs_with_profile_name(self):
        text = template_letter("Data Analyst", "Initech", PROFILE)
        self.assertTrue(text.startswith("Dear Hiring Manager,"))
        self.assertIn("Data Analyst position at Initech", text)
        self.assertIn("Initech's mission", text)
        self.assertTrue(text.endswith("Best regards,\nGrace Hopper"))

    def test_template_without_name(self):
        self.assertTrue(template_letter("Analyst", "Initech", None).endswith("Best regards,\nYour Name"))
        self.assertTrue(template_letter("Analyst", "Initech", {"name": "  "}).endswith("Your Name"))

    def test_prompt_carries_job_and_profile(self):
        messages = build_messages("Engineer", "Navy", None, PROFILE)
        self.assertEqual([message.role for message in messages], ["system", "user"])
        prompt = messages[1].content
        self.assertIn("Job Title: Engineer", prompt)
        self.assertIn("Company: Navy", prompt)
        self.assertIn("Job Description: Not provided", prompt)
        self.assertIn('"Grace Hopper"', prompt)
        self.assertIn("coverLetter", prompt)


if __name__ == "__main__":
    unittest.main()
