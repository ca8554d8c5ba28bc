"""
Campaign Payout Engine — FastAPI application.

This is the caller layer around the pure engine: it validates caller policy,
runs the engine, writes the report, and returns JSON. Persisting results,
crediting wallets and moving refund money stay with the consuming service.

  POST /api/distribute
    1. Validate caller policy (unique submission IDs, per-creator limit)
    2. Run the distribution pipeline (distribution.py)
    3. Generate .xlsx report (excel_export.py)
    4. Return DistributionResult + report filename

  POST /api/distribute/snapshot
    Same as /api/distribute, submissions parsed from a CSV metrics snapshot.

  POST /api/estimate
    Live approximate earnings next to the confirmed figures (estimates.py).

  GET /api/tiers
    Tier table: budget brackets, commission, duration, insurance thresholds.

  GET /api/download/{filename}
    Serve a generated .xlsx file from the output directory.

Error handling:
  - Policy violation / bad CSV → 400
  - Schema validation (negative counts, commission outside 0–100) → 422
  - Missing report → 404
"""

import os
import logging
from collections import Counter

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from models.schemas import (
    CampaignInput,
    DistributeResponse,
    EstimateResponse,
    SnapshotDistributeRequest,
    SubmissionInput,
    TierInfo,
)
import config
from services.allocation import find_duplicate_ids
from services.distribution import run_distribution
from services.estimates import estimate_campaign
from services.excel_export import generate_report
from services.snapshot_loader import load_submissions_csv
from services.tiers import list_tiers

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Campaign Payout Engine",
    description="Insurance gate, eligibility and Robin Hood payout allocation for sponsored campaigns",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Ensure output directory exists at startup
os.makedirs(config.OUTPUT_DIR, exist_ok=True)


# ===========================================================================
# POST /api/distribute — Final distribution
# ===========================================================================

@app.post("/api/distribute", response_model=DistributeResponse)
async def distribute(campaign: CampaignInput):
    """
    Run the final distribution for one campaign and write its report.

    Returns:
        DistributeResponse with status, report filename, and the full result
    """
    logger.info(f"=" * 60)
    logger.info(f"DISTRIBUTION: campaign {campaign.campaign_id}")
    logger.info(f"=" * 60)

    return _distribute(campaign)


# ===========================================================================
# POST /api/distribute/snapshot — Final distribution from a CSV snapshot
# ===========================================================================

@app.post("/api/distribute/snapshot", response_model=DistributeResponse)
async def distribute_snapshot(request: SnapshotDistributeRequest):
    """Parse the CSV snapshot into submissions, then distribute."""
    logger.info(f"DISTRIBUTION (snapshot): campaign {request.campaign_id}")

    try:
        submissions = load_submissions_csv(request.snapshot_csv)
    except ValueError as e:
        logger.error(f"Invalid metrics snapshot: {e}")
        raise HTTPException(
            status_code=400,
            detail={"status": "error", "message": str(e)},
        )

    campaign = CampaignInput(
        campaign_id=request.campaign_id,
        title=request.title,
        gross_budget=request.gross_budget,
        commission_percent=request.commission_percent,
        tier=request.tier,
        submissions=submissions,
    )
    return _distribute(campaign)


# ===========================================================================
# POST /api/estimate — Live approximate earnings
# ===========================================================================

@app.post("/api/estimate", response_model=EstimateResponse)
async def estimate(campaign: CampaignInput):
    """Approximate earnings for every submission; confirmed figures echoed."""
    _validate_submission_policy(campaign.submissions)
    estimates = estimate_campaign(campaign)
    return EstimateResponse(
        status="success",
        campaign_id=campaign.campaign_id,
        estimates=estimates,
    )


# ===========================================================================
# GET /api/tiers — Tier table
# ===========================================================================

@app.get("/api/tiers", response_model=list[TierInfo])
async def tiers():
    return list_tiers()


# ===========================================================================
# GET /api/download/{filename} — Serve generated .xlsx files
# ===========================================================================

@app.get("/api/download/{filename}")
async def download_report(filename: str):
    """
    Download a generated .xlsx report from the output directory.

    Returns 404 if the file doesn't exist.
    """
    file_path = os.path.join(config.OUTPUT_DIR, os.path.basename(filename))

    if not os.path.exists(file_path):
        raise HTTPException(
            status_code=404,
            detail={
                "status": "error",
                "message": f"Report not found: {filename}",
            },
        )

    return FileResponse(
        file_path,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f'attachment; filename="{os.path.basename(filename)}"',
        },
    )


# ===========================================================================
# Helpers
# ===========================================================================

def _distribute(campaign: CampaignInput) -> DistributeResponse:
    _validate_submission_policy(campaign.submissions)

    result = run_distribution(campaign)

    filepath = generate_report(result, campaign_title=campaign.title)
    filename = os.path.basename(filepath)
    logger.info(f"  Report saved: {filename}")

    return DistributeResponse(status="success", filename=filename, result=result)


def _validate_submission_policy(submissions: list[SubmissionInput]) -> None:
    """
    Caller-side checks the engine assumes were done before it runs:
      - submission IDs are unique
      - no creator exceeds MAX_SUBMISSIONS_PER_CREATOR

    Raises:
        HTTPException(400) on violation.
    """
    duplicates = find_duplicate_ids(s.submission_id for s in submissions)
    if duplicates:
        raise HTTPException(
            status_code=400,
            detail={
                "status": "error",
                "message": f"Duplicate submission IDs: {', '.join(duplicates)}",
            },
        )

    over_limit = _creators_over_limit(submissions, config.MAX_SUBMISSIONS_PER_CREATOR)
    if over_limit:
        raise HTTPException(
            status_code=400,
            detail={
                "status": "error",
                "message": (
                    f"Creators over the {config.MAX_SUBMISSIONS_PER_CREATOR}-submission "
                    f"limit: {', '.join(over_limit)}"
                ),
            },
        )


def _creators_over_limit(submissions: list[SubmissionInput], limit: int) -> list[str]:
    """Creator IDs with more than `limit` submissions, sorted."""
    counts = Counter(s.creator_id for s in submissions)
    return sorted(creator for creator, n in counts.items() if n > limit)


# ===========================================================================
# Main entry point
# ===========================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
