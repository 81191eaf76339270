"""
Lawyer assignment: pick a reviewer whose specializations cover the
document's regulations, otherwise any lawyer at all.
"""

import logging
import re
from typing import Iterable, List, Optional

from models import User

logger = logging.getLogger(__name__)


def _patterns(regulations) -> List[re.Pattern]:
    regs = [regulations] if isinstance(regulations, str) else list(regulations or [])
    return [re.compile(re.escape(str(r).strip()), re.IGNORECASE) for r in regs if str(r or "").strip()]

def specialization_matches(lawyer: User, regulations) -> bool:
    """True when any specialization contains any regulation code, ignoring case."""
    patterns = _patterns(regulations)
    return any(p.search(spec) for spec in lawyer.specializations or [] for p in patterns)

def resolve_assignment(regulations, lawyers: Iterable[User]) -> Optional[User]:
    """
    First lawyer in pool order with a matching specialization; failing that,
    the first lawyer in the pool; None when there are no lawyers.
    """
    pool = [u for u in lawyers if u.is_lawyer]
    if not pool:
        logger.info("No lawyers registered; document stays unassigned")
        return None

    for lawyer in pool:
        if specialization_matches(lawyer, regulations):
            logger.info("Assigned lawyer %s by specialization", lawyer.id)
            return lawyer

    logger.info("No specialization match; falling back to lawyer %s", pool[0].id)
    return pool[0]
