import warnings
from datetime import datetime, timedelta, timezone

from kestrelpay.intents import IntentManager
from kestrelpay.utils import utc_timestamp


def test_utc_timestamp_is_zulu_iso():
    stamp = utc_timestamp()
    assert stamp.endswith("Z")
    assert "+00:00" not in stamp

    parsed = datetime.fromisoformat(stamp[:-1] + "+00:00")
    assert parsed.utcoffset() == timedelta(0)
    assert abs(datetime.now(timezone.utc) - parsed) < timedelta(minutes=1)


def test_utc_timestamp_raises_no_deprecation_warning():
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        utc_timestamp()


def test_records_share_the_timestamp_format(recommending_engine):
    manager = IntentManager(recommending_engine)
    sample = manager.get_intent("sample-1")
    recommendation = recommending_engine.evaluate(sample.descriptor)

    for stamp in (sample.created_at, sample.executed_at, recommendation.timestamp):
        assert stamp.endswith("Z")
        assert datetime.fromisoformat(stamp[:-1] + "+00:00").tzinfo is not None
