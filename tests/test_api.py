import os
import tempfile
import unittest
import uuid
from io import BytesIO
from unittest.mock import patch

os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.mkdtemp(prefix="zolla-tests-"), "zolla.db"))
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")

from docx import Document  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from zolla.ai.types import AIClientError  # noqa: E402
from zolla.main import app  # noqa: E402
from zolla.storage import analyses as analyses_store  # noqa: E402

ANALYSIS_JSON = (
    '```json\n{"match_summary": "Strong fit.", "match_score": "77/100", '
    '"job_keywords_detected": [{"keyword": "FastAPI", "status": "Present"}, '
    '{"keyword": "Terraform", "status": "Missing"}], '
    '"gaps_and_suggestions": ["Add infrastructure work"]}\n```'
)


class FakeAIClient:
    def __init__(self, *replies: str, error: AIClientError | None = None):
        self.replies = list(replies)
        self.error = error
        self.calls = 0

    async def complete(self, messages, *, temperature):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)


def _headers(user_id: str | None = None) -> dict:
    return {"X-User-Id": user_id or f"user-{uuid.uuid4().hex[:10]}"}


class HealthApiTests(unittest.TestCase):
    def test_health(self):
        client = TestClient(app)
        response = client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")


class AnalysisApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def test_analysis_types_catalog(self):
        response = self.client.get("/v1/analysis/types")
        self.assertEqual(response.status_code, 200)
        options = {item["id"]: item for item in response.json()}
        self.assertEqual(len(options), 6)
        self.assertFalse(options["job_match_analysis"]["is_premium"])
        self.assertTrue(options["career_story_flow"]["is_premium"])

    def test_requires_user(self):
        response = self.client.post("/v1/analysis", json={"resume_text": "r", "job_description": "j"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Please sign in to analyze your resume.")

    def test_duplicate_submission_is_served_from_history(self):
        headers = _headers()
        fake = FakeAIClient(ANALYSIS_JSON)
        payload = {"resume_text": "FastAPI developer", "job_description": "Platform engineer"}
        with patch("zolla.services.analysis_service.get_ai_client", return_value=fake):
            first = self.client.post("/v1/analysis", json=payload, headers=headers)
            second = self.client.post("/v1/analysis", json=payload, headers=headers)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(fake.calls, 1)
        first_body, second_body = first.json(), second.json()
        self.assertFalse(first_body["used_cached_result"])
        self.assertTrue(second_body["used_cached_result"])
        self.assertEqual(second_body["record_id"], first_body["record_id"])
        self.assertEqual(second_body["issues"], {"total": 1, "details": ["1 missing keyword"]})

    def test_missing_job_description(self):
        response = self.client.post(
            "/v1/analysis",
            json={"resume_text": "Resume", "job_description": "", "selected_analysis_types": ["job_match_analysis"]},
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Please provide the job description for job match analysis.")

    def test_empty_type_selection(self):
        response = self.client.post(
            "/v1/analysis",
            json={"resume_text": "Resume", "job_description": "Job", "selected_analysis_types": []},
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 400)

    def test_unknown_type_is_rejected(self):
        response = self.client.post(
            "/v1/analysis",
            json={"resume_text": "Resume", "selected_analysis_types": ["horoscope"]},
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 422)

    def test_invalid_ai_reply_maps_to_bad_gateway(self):
        fake = FakeAIClient("Sorry, no JSON today.")
        with patch("zolla.services.analysis_service.get_ai_client", return_value=fake):
            response = self.client.post(
                "/v1/analysis",
                json={"resume_text": "Resume", "job_description": "Job"},
                headers=_headers(),
            )
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "Invalid JSON response from AI. Please try again.")

    def test_unconfigured_ai_maps_to_unavailable(self):
        fake = FakeAIClient(error=AIClientError("OpenAI API key not configured", code="llm_disabled"))
        with patch("zolla.services.analysis_service.get_ai_client", return_value=fake):
            response = self.client.post(
                "/v1/analysis",
                json={"resume_text": "Resume", "job_description": "Job"},
                headers=_headers(),
            )
        self.assertEqual(response.status_code, 503)

    def test_extract_text_from_txt(self):
        response = self.client.post(
            "/v1/extract-text",
            files={"file": ("resume.txt", b"Python developer\nBuilt APIs", "text/plain")},
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source_type"], "text")
        self.assertIn("Built APIs", body["text"])
        self.assertEqual(body["characters"], len(body["text"]))

    def test_extract_text_from_docx(self):
        buffer = BytesIO()
        document = Document()
        document.add_paragraph("Senior data engineer")
        document.add_paragraph("Spark and Airflow")
        document.save(buffer)
        response = self.client.post(
            "/v1/extract-text",
            files={
                "file": (
                    "resume.docx",
                    buffer.getvalue(),
                    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                )
            },
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source_type"], "word")
        self.assertEqual(body["text"], "Senior data engineer\nSpark and Airflow")

    def test_extract_text_rejects_unsupported_type(self):
        response = self.client.post(
            "/v1/extract-text",
            files={"file": ("resume.png", b"\x89PNG\r\n", "image/png")},
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Unsupported file type", response.json()["detail"])

    def test_extract_text_rejects_signature_mismatch(self):
        response = self.client.post(
            "/v1/extract-text",
            files={"file": ("resume.docx", b"plain text pretending", "text/plain")},
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 400)

    def test_extract_text_rejects_oversized_file(self):
        response = self.client.post(
            "/v1/extract-text",
            files={"file": ("resume.txt", b"a" * (10 * 1024 * 1024 + 1), "text/plain")},
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 413)


class WizardApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def test_full_job_match_flow(self):
        headers = _headers()
        response = self.client.get("/v1/wizard", headers=headers)
        self.assertEqual(response.json()["state"]["current_step"], 1)
        self.assertFalse(response.json()["can_proceed"])

        blocked = self.client.post("/v1/wizard/next", headers=headers)
        self.assertEqual(blocked.status_code, 409)
        self.assertEqual(blocked.json()["detail"], "Please provide your resume text.")

        uploaded = self.client.post(
            "/v1/wizard/upload",
            files={"file": ("cv.txt", b"Backend engineer with FastAPI", "text/plain")},
            headers=headers,
        )
        self.assertEqual(uploaded.status_code, 200)
        self.assertEqual(uploaded.json()["state"]["file_name"], "cv.txt")
        self.assertTrue(uploaded.json()["can_proceed"])

        step2 = self.client.post("/v1/wizard/next", headers=headers)
        self.assertEqual(step2.json()["state"]["current_step"], 2)
        step3 = self.client.post("/v1/wizard/next", headers=headers)
        self.assertEqual(step3.json()["state"]["current_step"], 3)
        self.assertTrue(step3.json()["requires_job_description"])

        self.client.patch("/v1/wizard", json={"job_description": "Platform role"}, headers=headers)
        fake = FakeAIClient(ANALYSIS_JSON)
        with patch("zolla.services.analysis_service.get_ai_client", return_value=fake):
            results = self.client.post("/v1/wizard/next", headers=headers)
        self.assertEqual(results.status_code, 200)
        state = results.json()["state"]
        self.assertEqual(state["current_step"], 4)
        self.assertEqual(state["analysis_result"]["match_score"], "77/100")
        self.assertFalse(state["used_cached_result"])

        back = self.client.post("/v1/wizard/back", headers=headers)
        self.assertEqual(back.json()["state"]["current_step"], 3)

        reset = self.client.delete("/v1/wizard", headers=headers)
        self.assertEqual(reset.json()["state"]["current_step"], 1)
        self.assertEqual(reset.json()["state"]["resume_text"], "")

    def test_deselecting_all_types_blocks_step_two(self):
        headers = _headers()
        self.client.patch("/v1/wizard", json={"resume_text": "Resume"}, headers=headers)
        self.client.post("/v1/wizard/next", headers=headers)
        response = self.client.post("/v1/wizard/types/job_match_analysis/toggle", headers=headers)
        self.assertEqual(response.json()["state"]["selected_analysis_types"], [])
        self.assertFalse(response.json()["can_proceed"])
        blocked = self.client.post("/v1/wizard/next", headers=headers)
        self.assertEqual(blocked.status_code, 409)
        self.assertEqual(blocked.json()["detail"], "Please select at least one analysis type.")

    def test_toggle_rejects_unknown_and_premium_types(self):
        headers = _headers()
        self.assertEqual(self.client.post("/v1/wizard/types/nope/toggle", headers=headers).status_code, 404)
        self.assertEqual(
            self.client.post("/v1/wizard/types/career_story_flow/toggle", headers=headers).status_code, 403
        )

    def test_failed_upload_clears_file_name(self):
        headers = _headers()
        response = self.client.post(
            "/v1/wizard/upload",
            files={"file": ("cv.pdf", b"not a pdf", "application/pdf")},
            headers=headers,
        )
        self.assertEqual(response.status_code, 400)
        state = self.client.get("/v1/wizard", headers=headers).json()["state"]
        self.assertIsNone(state["file_name"])

    def test_oversized_upload_clears_file_name(self):
        headers = _headers()
        response = self.client.post(
            "/v1/wizard/upload",
            files={"file": ("big.txt", b"a" * (10 * 1024 * 1024 + 1), "text/plain")},
            headers=headers,
        )
        self.assertEqual(response.status_code, 413)
        state = self.client.get("/v1/wizard", headers=headers).json()["state"]
        self.assertIsNone(state["file_name"])
        self.assertEqual(state["resume_text"], "")

    def test_patch_rejects_premium_types(self):
        headers = _headers()
        response = self.client.patch(
            "/v1/wizard",
            json={"selected_analysis_types": ["job_match_analysis", "format_optimization"]},
            headers=headers,
        )
        self.assertEqual(response.status_code, 403)
        state = self.client.get("/v1/wizard", headers=headers).json()["state"]
        self.assertEqual(state["selected_analysis_types"], ["job_match_analysis"])

    def test_response_shape(self):
        body = self.client.get("/v1/wizard", headers=_headers()).json()
        self.assertEqual(set(body), {"state", "can_proceed", "requires_job_description"})

    def test_job_description_step_analyzes_after_job_match_is_dropped(self):
        headers = _headers()
        self.client.patch("/v1/wizard", json={"resume_text": "Resume"}, headers=headers)
        self.client.post("/v1/wizard/next", headers=headers)
        self.client.post("/v1/wizard/next", headers=headers)
        self.client.patch("/v1/wizard", json={"selected_analysis_types": ["ats_compatibility"]}, headers=headers)
        fake = FakeAIClient(
            '{"match_score": "0/100", "ats_compatibility": '
            '{"score": 8, "summary": "Clean", "issues": [], "suggestions": []}}'
        )
        with patch("zolla.services.analysis_service.get_ai_client", return_value=fake):
            response = self.client.post("/v1/wizard/next", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["state"]["current_step"], 4)
        self.assertEqual(fake.calls, 1)

    def test_remove_file_clears_resume(self):
        headers = _headers()
        self.client.patch("/v1/wizard", json={"resume_text": "Resume", "file_name": "cv.txt"}, headers=headers)
        state = self.client.delete("/v1/wizard/file", headers=headers).json()["state"]
        self.assertIsNone(state["file_name"])
        self.assertEqual(state["resume_text"], "")

    def test_ai_failure_keeps_current_step(self):
        headers = _headers()
        self.client.patch(
            "/v1/wizard",
            json={"resume_text": "Resume", "job_description": "Job"},
            headers=headers,
        )
        self.client.post("/v1/wizard/next", headers=headers)
        self.client.post("/v1/wizard/next", headers=headers)
        fake = FakeAIClient("garbage")
        with patch("zolla.services.analysis_service.get_ai_client", return_value=fake):
            response = self.client.post("/v1/wizard/next", headers=headers)
        self.assertEqual(response.status_code, 502)
        self.assertEqual(self.client.get("/v1/wizard", headers=headers).json()["state"]["current_step"], 3)


class PremiumApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def test_generate_package_stores_new_record(self):
        user_id = f"user-{uuid.uuid4().hex[:10]}"
        fake = FakeAIClient(
            '{"tailored_resume": "Tailored resume body", "improvements": ["Reordered skills"]}',
            '{"cover_letter": "Dear hiring team", "key_points": ["Platform impact"]}',
        )
        with patch("zolla.services.premium_service.get_ai_client", return_value=fake):
            response = self.client.post(
                "/v1/premium/generate",
                json={
                    "resume_text": "Resume",
                    "job_description": "Job",
                    "analysis_result": {"match_score": "64/100"},
                },
                headers=_headers(user_id),
            )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["tailored_resume"]["tailored_resume"], "Tailored resume body")
        self.assertEqual(body["cover_letter"]["key_points"], ["Platform impact"])

        record = analyses_store.get_analysis(user_id=user_id, record_id=body["record_id"])
        self.assertEqual(record.compatibility_score, 64)
        self.assertEqual(record.cover_letter, "Dear hiring team")
        self.assertIsNone(record.resume_hash)

    def test_requires_resume_and_job_description(self):
        response = self.client.post(
            "/v1/premium/tailored-resume",
            json={"resume_text": "", "job_description": "Job"},
            headers=_headers(),
        )
        self.assertEqual(response.status_code, 422)

    def test_cover_letter_only(self):
        fake = FakeAIClient('{"cover_letter": "Hello", "key_points": []}')
        with patch("zolla.services.premium_service.get_ai_client", return_value=fake):
            response = self.client.post(
                "/v1/premium/cover-letter",
                json={"resume_text": "Resume", "job_description": "Job"},
                headers=_headers(),
            )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["cover_letter"], "Hello")


if __name__ == "__main__":
    unittest.main()
