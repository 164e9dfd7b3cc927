"""Map wall-clock time to an hour offset inside a cached forecast window."""

from datetime import datetime, timedelta

from astrocast.models.forecast import ForecastRecord, OutOfRange

ONE_HOUR = timedelta(hours=1)


def index_for(now: datetime, record: ForecastRecord) -> int | OutOfRange:
    """Hour offset of ``now`` into ``record``, floored.

    Times before the window start or at/after its end are OutOfRange; the
    window is never extended or cropped.
    """
    offset = (now - record.window_start) // ONE_HOUR
    if 0 <= offset < record.hours:
        return offset
    return OutOfRange(offset=offset, hours=record.hours)
