"""
Missing-field detection for the quality dashboard.

Each artifact is checked independently for entities, location, amount and
date. A user annotation always counts as present. Location is user-supplied
only; amount also accepts a currency pattern in title or summary.
"""

import logging
from typing import Iterable, List, Optional

from .amounts import has_amount_pattern
from .dates import get_undated_artifacts
from .entities import extract_entity_strings
from .heuristics import HeuristicsConfig, default_heuristics
from .models import MissingInfoResult, TimelineArtifact

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def compute_missing_info(
    artifacts: List[TimelineArtifact],
    heuristics: Optional[HeuristicsConfig] = None
) -> MissingInfoResult:
    heuristics = heuristics or default_heuristics()
    result = MissingInfoResult(
        missing_date_ids=[item.artifact.artifact_id for item in get_undated_artifacts(artifacts)]
    )

    for item in artifacts:
        artifact = item.artifact
        user = artifact.user_annotations
        artifact_id = artifact.artifact_id

        if (
            not artifact.has_direct_entities
            and not user.entities
            and not extract_entity_strings(item)
        ):
            result.missing_entities_ids.append(artifact_id)

        if _blank(user.location):
            result.missing_location_ids.append(artifact_id)

        if _blank(user.amount) and not has_amount_pattern(artifact.fact_text(), heuristics):
            result.missing_amount_ids.append(artifact_id)

    logger.debug(f"Missing info over {len(artifacts)} artifacts: {result.counts()}")
    return result


def get_artifacts_by_ids(artifacts: List[TimelineArtifact], ids: Iterable[str]) -> List[TimelineArtifact]:
    wanted = set(ids)
    return [item for item in artifacts if item.artifact.artifact_id in wanted]
