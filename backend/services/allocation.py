"""
Capped proportional allocation ("Robin Hood").

Distributes the net pool across eligible participants in proportion to score,
with no participant above MAX_SHARE_PERCENT (40%). Share taken from capped
participants is redistributed to the rest in proportion to THEIR scores.

Algorithm — fixed-point loop over an active pool:
  1. active = participants with score > 0, remaining_share = 1
  2. share(p) = remaining_share × score(p) / Σ score(active)
  3. over = active participants whose share exceeds the cap
       - none over             → done
       - every active one over → no peer left to absorb the excess:
                                 the cap is waived for them, done
       - otherwise             → pin each `over` participant at the cap,
                                 remove it from active, remaining_share −= cap
                                 per pinned participant, repeat from 2

Redistributing at step 2 is equivalent to handing the clipped excess to the
uncapped participants pro rata to score. Each round pins at least one more
participant, so the loop runs at most len(participants) times. How many end
up pinned at exactly 40% falls out of the data (typically ≤ 2).

Zero-score participants get a zero allocation. Empty input or zero total
score → empty result. No rounding happens here.
"""

import logging
from collections import Counter
from decimal import Decimal
from typing import Iterable, Sequence

from models.schemas import ShareAllocation

logger = logging.getLogger(__name__)

MAX_SHARE_PERCENT = Decimal("0.40")


def compute_robin_hood_shares(
    participants: Sequence[tuple[str, Decimal]],
    net_pool: Decimal,
    cap: Decimal = MAX_SHARE_PERCENT,
) -> list[ShareAllocation]:
    """
    Compute final share + earnings for each participant.

    Args:
        participants: (submission_id, score) pairs, typically the eligible set
        net_pool:     Amount to distribute
        cap:          Maximum share per participant

    Returns:
        One ShareAllocation per participant, in input order. Empty when there
        are no participants or the total score is 0.

    Raises:
        ValueError: If a submission_id appears more than once.
    """
    if not participants:
        return []

    duplicates = find_duplicate_ids(sub_id for sub_id, _ in participants)
    if duplicates:
        raise ValueError(f"Duplicate submission IDs: {', '.join(duplicates)}")

    total_score = sum((score for _, score in participants), Decimal("0"))
    if total_score <= 0:
        logger.info("Robin Hood: total score is 0 — nothing to allocate")
        return []

    scores = {sub_id: score for sub_id, score in participants}
    shares: dict[str, Decimal] = {sub_id: Decimal("0") for sub_id, _ in participants}
    capped: set[str] = set()

    active = [sub_id for sub_id, score in participants if score > 0]
    remaining_share = Decimal("1")
    rounds = 0

    while active:
        rounds += 1
        active_total = sum((scores[s] for s in active), Decimal("0"))
        for sub_id in active:
            shares[sub_id] = remaining_share * scores[sub_id] / active_total

        over = [s for s in active if shares[s] > cap]
        if not over:
            break

        if len(over) == len(active):
            # No uncapped peer left to absorb the excess: waive the cap
            logger.warning(
                f"Robin Hood: cap waived for {len(active)} participant(s) "
                f"with no redistribution target "
                f"(max share {max(shares[s] for s in active):.4f})"
            )
            break

        for sub_id in over:
            shares[sub_id] = cap
            capped.add(sub_id)
            logger.debug(f"  Round {rounds}: {sub_id} capped at {cap}")

        remaining_share -= cap * len(over)
        active = [s for s in active if s not in capped]

    allocations = [
        ShareAllocation(
            submission_id=sub_id,
            score=score,
            share_percent=shares[sub_id],
            earnings_amount=shares[sub_id] * net_pool,
            capped=sub_id in capped,
        )
        for sub_id, score in participants
    ]

    logger.info(
        f"Robin Hood allocation: {len(allocations)} participants, "
        f"{len(capped)} capped at {cap}, {rounds} round(s), "
        f"pool={net_pool}"
    )
    return allocations


def find_duplicate_ids(ids: Iterable[str]) -> list[str]:
    """IDs that occur more than once, sorted."""
    counts = Counter(ids)
    return sorted(sub_id for sub_id, n in counts.items() if n > 1)
