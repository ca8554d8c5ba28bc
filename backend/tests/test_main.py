"""
Tests for main.py — FastAPI endpoints and caller-side policy.

Tests verify:
  1. POST /api/distribute
     - Happy path: DISTRIBUTED result + report file
     - Gate failure: INSURANCE_REFUND still returns 200 with a report
     - Schema validation: negative counts / bad commission → 422
     - Policy: duplicate submission IDs, per-creator limit → 400
  2. POST /api/distribute/snapshot
     - CSV parsed and distributed; bad CSV → 400
  3. POST /api/estimate
  4. GET /api/tiers
  5. GET /api/download/{filename}
     - Valid file → 200 with correct headers; missing file → 404
  6. Helpers: _creators_over_limit
"""

import sys
import os
import pytest
from decimal import Decimal
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from fastapi.testclient import TestClient

from models.schemas import SubmissionInput
from main import app, _creators_over_limit


# ===========================================================================
# Fixtures
# ===========================================================================

@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


# ===========================================================================
# Test data helpers
# ===========================================================================

def make_submission(sid, creator=None, views=0, likes=0, shares=0):
    return {
        "submission_id": sid,
        "creator_id": creator or f"creator_{sid}",
        "views": views,
        "likes": likes,
        "shares": shares,
    }


STRONG_SUBMISSIONS = [
    make_submission("s1", views=850_000, likes=95_000, shares=12_000),
    make_submission("s2", views=320_000, likes=28_000, shares=4_500),
    make_submission("s3", views=280_000, likes=35_000, shares=8_000),
    make_submission("s4", views=95_000, likes=8_000, shares=1_200),
    make_submission("s5", views=45_000, likes=3_500, shares=600),
]


def campaign_payload(submissions=None, **overrides):
    payload = {
        "campaign_id": "camp_api",
        "title": "API Campaign",
        "gross_budget": "50000",
        "commission_percent": "15",
        "tier": "B",
        "submissions": STRONG_SUBMISSIONS if submissions is None else submissions,
    }
    payload.update(overrides)
    return payload


# ===========================================================================
# 1. POST /api/distribute
# ===========================================================================

class TestDistribute:

    def test_success_response(self, client, output_dir):
        response = client.post("/api/distribute", json=campaign_payload())

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "success"
        assert data["filename"] == "Payout Distribution camp_api.xlsx"
        assert os.path.exists(os.path.join(output_dir, data["filename"]))

    def test_result_fields(self, client, output_dir):
        result = client.post("/api/distribute", json=campaign_payload()).json()["result"]

        assert result["outcome"] == "DISTRIBUTED"
        assert Decimal(result["net_pool"]) == Decimal("42500")
        assert Decimal(result["commission_amount"]) == Decimal("7500")
        shares = {s["submission_id"]: Decimal(s["share_percent"]) for s in result["submissions"]}
        assert shares["s1"] == Decimal("0.40")
        assert all(v <= Decimal("0.40") for v in shares.values())

    def test_gate_failure_is_not_an_http_error(self, client, output_dir):
        payload = campaign_payload(submissions=STRONG_SUBMISSIONS[:2])
        response = client.post("/api/distribute", json=payload)

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["outcome"] == "INSURANCE_REFUND"
        assert result["failed_checks"] == ["Submissions: 2/5"]
        assert Decimal(result["refund_amount"]) == Decimal("47500")

    @pytest.mark.parametrize("overrides", [
        {"commission_percent": "101"},
        {"commission_percent": "-1"},
        {"gross_budget": "-50000"},
        {"submissions": [make_submission("s1", views=-10)]},
    ])
    def test_schema_validation_422(self, client, output_dir, overrides):
        response = client.post("/api/distribute", json=campaign_payload(**overrides))
        assert response.status_code == 422

    def test_duplicate_submission_ids_400(self, client, output_dir):
        subs = STRONG_SUBMISSIONS + [make_submission("s1", views=10)]
        response = client.post("/api/distribute", json=campaign_payload(submissions=subs))

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["status"] == "error"
        assert "s1" in detail["message"]

    def test_creator_over_limit_400(self, client, output_dir):
        subs = [make_submission(f"s{i}", creator="prolific", views=10_000) for i in range(11)]
        response = client.post("/api/distribute", json=campaign_payload(submissions=subs))

        assert response.status_code == 400
        assert "prolific" in response.json()["detail"]["message"]

    def test_creator_at_limit_ok(self, client, output_dir):
        subs = [make_submission(f"s{i}", creator="prolific", views=10_000) for i in range(10)]
        response = client.post("/api/distribute", json=campaign_payload(submissions=subs))
        assert response.status_code == 200

    def test_limit_from_config(self, client, output_dir):
        subs = [make_submission(f"s{i}", creator="duo", views=10_000) for i in range(3)]
        with patch("main.config.MAX_SUBMISSIONS_PER_CREATOR", 2):
            response = client.post("/api/distribute", json=campaign_payload(submissions=subs))
        assert response.status_code == 400


# ===========================================================================
# 2. POST /api/distribute/snapshot
# ===========================================================================

class TestDistributeSnapshot:

    CSV = (
        "submission_id,creator_id,views,likes,shares\n"
        "s1,c1,850000,95000,12000\n"
        "s2,c2,320000,28000,4500\n"
        "s3,c3,280000,35000,8000\n"
        "s4,c4,95000,8000,1200\n"
        "s5,c5,45000,3500,600\n"
    )

    def test_snapshot_distributed(self, client, output_dir):
        payload = {
            "campaign_id": "camp_csv",
            "gross_budget": "50000",
            "commission_percent": "15",
            "snapshot_csv": self.CSV,
        }
        response = client.post("/api/distribute/snapshot", json=payload)

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["outcome"] == "DISTRIBUTED"
        assert result["total_submissions"] == 5

    def test_bad_csv_400(self, client, output_dir):
        payload = {
            "campaign_id": "camp_csv",
            "gross_budget": "50000",
            "commission_percent": "15",
            "snapshot_csv": "submission_id,views\ns1,10\n",
        }
        response = client.post("/api/distribute/snapshot", json=payload)

        assert response.status_code == 400
        assert "missing columns" in response.json()["detail"]["message"]

    def test_repeated_ids_in_csv_400(self, client, output_dir):
        payload = {
            "campaign_id": "camp_csv",
            "gross_budget": "50000",
            "commission_percent": "15",
            "snapshot_csv": self.CSV + "s1,c9,1000,10,1\n",
        }
        response = client.post("/api/distribute/snapshot", json=payload)

        assert response.status_code == 400
        assert "Duplicate submission IDs: s1" in response.json()["detail"]["message"]

    @pytest.mark.parametrize("csv_text", [
        "submission_id,creator_id,views,likes,shares,confirmed_earnings\ns1,c1,100,1,1,abc\n",
        "submission_id,creator_id,views,likes,shares\ns1,c1,inf,1,1\n",
        "submission_id,creator_id,views,likes,shares\ns1,c1,12.7,1,1\n",
    ])
    def test_bad_cell_400(self, client, output_dir, csv_text):
        payload = {
            "campaign_id": "camp_csv",
            "gross_budget": "50000",
            "commission_percent": "15",
            "snapshot_csv": csv_text,
        }
        response = client.post("/api/distribute/snapshot", json=payload)

        assert response.status_code == 400
        assert "Invalid metric value" in response.json()["detail"]["message"]


# ===========================================================================
# 3. POST /api/estimate
# ===========================================================================

class TestEstimate:

    def test_estimates_returned(self, client):
        response = client.post("/api/estimate", json=campaign_payload())

        assert response.status_code == 200
        data = response.json()
        assert data["campaign_id"] == "camp_api"
        assert [e["submission_id"] for e in data["estimates"]] == ["s1", "s2", "s3", "s4", "s5"]
        top = data["estimates"][0]
        assert Decimal(top["approximate_share_percent"]) == Decimal("0.40")
        assert top["differs_from_confirmed"] is True


# ===========================================================================
# 4. GET /api/tiers
# ===========================================================================

class TestTiers:

    def test_tier_table(self, client):
        response = client.get("/api/tiers")

        assert response.status_code == 200
        tiers = response.json()
        assert [t["tier"] for t in tiers] == ["C", "B", "A", "S"]
        assert tiers[1]["commission_percent"] == 15
        assert tiers[1]["thresholds"]["min_submissions"] == 5


# ===========================================================================
# 5. GET /api/download/{filename}
# ===========================================================================

class TestDownload:

    def test_download_generated_report(self, client, output_dir):
        filename = client.post("/api/distribute", json=campaign_payload()).json()["filename"]

        response = client.get(f"/api/download/{filename}")

        assert response.status_code == 200
        assert "spreadsheetml" in response.headers["content-type"]
        assert filename in response.headers["content-disposition"]

    def test_missing_file_404(self, client, output_dir):
        response = client.get("/api/download/nope.xlsx")

        assert response.status_code == 404
        assert response.json()["detail"]["status"] == "error"


# ===========================================================================
# 6. Helpers
# ===========================================================================

class TestCreatorsOverLimit:

    def make(self, creator, n):
        return [
            SubmissionInput(submission_id=f"{creator}_{i}", creator_id=creator)
            for i in range(n)
        ]

    def test_none_over(self):
        subs = self.make("a", 10) + self.make("b", 3)
        assert _creators_over_limit(subs, 10) == []

    def test_sorted_offenders(self):
        subs = self.make("zed", 4) + self.make("amy", 5) + self.make("bo", 1)
        assert _creators_over_limit(subs, 3) == ["amy", "zed"]
