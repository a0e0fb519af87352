"""CVSS scoring helpers for engine-reported vulnerabilities.

Provides:
- score_from_vector: CVSS v3 base score from a vector string
- severity_label: Qualitative CVSS v3 rating for a score
"""

import structlog
from cvss import CVSS3
from cvss.exceptions import CVSS3Error

logger = structlog.get_logger()


def score_from_vector(vector: str) -> float:
    """Calculate the CVSS v3 base score of a vector.

    Accepts vectors with or without the ``CVSS:3.x/`` prefix, since the
    engine's JSON report omits it for some data sources.

    Args:
        vector: CVSS v3 vector (e.g. "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H")

    Returns:
        Base score between 0.0 and 10.0; 0.0 if the vector cannot be parsed

    Example:
        >>> score_from_vector("AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H")
        9.8
    """
    if not vector.startswith("CVSS:3"):
        vector = f"CVSS:3.1/{vector}"
    try:
        return float(CVSS3(vector).base_score)
    except CVSS3Error as e:
        logger.warning("cvss_vector_invalid", vector=vector, error=str(e))
        return 0.0


def severity_label(score: float) -> str:
    """Map a CVSS score to its qualitative rating.

    Returns:
        "none" | "low" | "medium" | "high" | "critical"
    """
    if score == 0.0:
        return "none"
    elif score < 4.0:
        return "low"
    elif score < 7.0:
        return "medium"
    elif score < 9.0:
        return "high"
    return "critical"
