# utils/timeline.py
import pandas as pd


def _day(x):
    ts = pd.to_datetime(x)
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.normalize()


def safe_dates_for_timeline(start_d, end_d):
    """Day-granular (start, end) for a timeline bar; end is pushed to start + 1 day
    when it does not fall after start. Returns (None, None) when a date is missing."""
    if not start_d or not end_d:
        return None, None
    s = _day(start_d)
    e = _day(end_d)
    if e <= s:
        e = s + pd.Timedelta(days=1)
    return s.date(), e.date()
