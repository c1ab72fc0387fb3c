"""Tests for startup preparation, refresh and the scheduler job."""

import pytest

from holiday_calendar import pipeline, scheduler
from holiday_calendar.exceptions import ArtifactIOError, FetchError
from holiday_calendar.loader import HolidayStore, HolidayTable
from holiday_calendar.pipeline import prepare_table, refresh_holidays


class TestPrepareTable:

    def test_downloads_when_missing(self, tmp_path, fake_get, source_bytes):
        calls = fake_get(source_bytes)
        path = tmp_path / "holidays_2026.csv"
        table = prepare_table(str(path), 2026, url="http://example.invalid/s.csv")
        assert len(calls) == 1
        assert path.exists()
        assert table.lookup("2026-01-01") == "元日"
        assert table.lookup("2026-09-22") == "祝日"
        assert table.lookup("2025-01-01") is None

    def test_reuses_existing_file(self, tmp_path, fake_get):
        calls = fake_get(b"")
        path = tmp_path / "holidays_2026.csv"
        path.write_text("2026-01-01,元日\n", encoding="utf-8")
        table = prepare_table(str(path), 2026)
        assert calls == []
        assert dict(table) == {"2026-01-01": "元日"}

    def test_force_redownloads(self, tmp_path, fake_get, source_bytes):
        calls = fake_get(source_bytes)
        path = tmp_path / "holidays_2026.csv"
        path.write_text("2026-01-01,old\n", encoding="utf-8")
        table = prepare_table(str(path), 2026, force=True)
        assert len(calls) == 1
        assert table.lookup("2026-01-01") == "元日"

    def test_fetch_error_is_fatal(self, tmp_path, fake_get):
        fake_get(b"", status_code=503)
        with pytest.raises(FetchError):
            prepare_table(str(tmp_path / "h.csv"), 2026)

    def test_unwritable_path_is_fatal(self, tmp_path, fake_get, source_bytes):
        fake_get(source_bytes)
        with pytest.raises(ArtifactIOError):
            prepare_table(str(tmp_path / "missing-dir" / "h.csv"), 2026)


class TestRefresh:

    def test_swaps_table(self, tmp_path, fake_get, source_bytes):
        fake_get(source_bytes)
        store = HolidayStore(HolidayTable({"2026-01-01": "old"}), str(tmp_path / "h.csv"))
        assert refresh_holidays(store, target_year=2026) is True
        assert store.current().lookup("2026-01-01") == "元日"
        assert len(store.current()) == 6

    def test_failure_keeps_old_table(self, tmp_path, fake_get):
        fake_get(b"", status_code=500)
        old = HolidayTable({"2026-01-01": "old"})
        store = HolidayStore(old, str(tmp_path / "h.csv"))
        with pytest.raises(FetchError):
            refresh_holidays(store, target_year=2026)
        assert store.current() is old
        assert not pipeline.refresh_in_progress()

    def test_concurrent_refresh_is_skipped(self, tmp_path, fake_get):
        calls = fake_get(b"")
        store = HolidayStore(HolidayTable(), str(tmp_path / "h.csv"))
        with pipeline._refresh_lock:
            assert refresh_holidays(store, target_year=2026) is False
        assert calls == []


class TestScheduler:

    def test_daily_refresh_swallows_fetch_errors(self, tmp_path, fake_get):
        fake_get(b"", status_code=500)
        old = HolidayTable({"2026-01-01": "old"})
        store = HolidayStore(old, str(tmp_path / "h.csv"))
        scheduler._daily_refresh(store, 2026)
        assert store.current() is old

    def test_schedule_refresh_registers_job(self, store):
        job = scheduler.schedule_refresh(store, 2026, at="05:00")
        try:
            assert job in scheduler.schedule.get_jobs()
            assert job.at_time.hour == 5
        finally:
            scheduler.schedule.cancel_job(job)

    def test_run_once(self, tmp_path, fake_get, source_bytes):
        fake_get(source_bytes)
        path = tmp_path / "h.csv"
        scheduler.run_once(str(path), 2026)
        assert path.read_text(encoding="utf-8").startswith("2026-01-01,元日")
