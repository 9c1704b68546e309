"""Field types shared by request/response schemas"""
from datetime import datetime, timezone
from typing import Optional, Annotated

from pydantic import AfterValidator


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are converted to UTC and stored without tzinfo"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]
