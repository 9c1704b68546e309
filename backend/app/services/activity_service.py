"""
Activity Service - project activity feed

Entries are added in the caller's transaction so an action and its feed
entry commit (or roll back) together.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.logging_config import logger
from app.models.activity_log import ActivityLog


async def log_activity(
    db: AsyncSession,
    project_id: str,
    actor_id: Optional[str],
    action: str,
    payload: Optional[Dict[str, Any]] = None,
) -> ActivityLog:
    """Add an activity entry to the session and mirror it to the log"""
    entry = ActivityLog(
        project_id=str(project_id),
        actor_id=str(actor_id) if actor_id else None,
        action=action,
        payload=payload or {},
    )
    db.add(entry)

    logger.log_activity(action, str(project_id), str(actor_id) if actor_id else "-", payload=payload or {})
    return entry


async def list_activity(
    db: AsyncSession,
    project_id: str,
    limit: Optional[int] = None,
) -> List[ActivityLog]:
    """Newest first, capped at ACTIVITY_FEED_LIMIT"""
    limit = min(limit or settings.ACTIVITY_FEED_LIMIT, settings.ACTIVITY_FEED_LIMIT)
    result = await db.execute(
        select(ActivityLog)
        .where(ActivityLog.project_id == str(project_id))
        .order_by(ActivityLog.created_at.desc(), ActivityLog.sequence.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
