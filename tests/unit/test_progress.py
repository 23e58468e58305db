from __future__ import annotations

from unittest.mock import patch

from timecard_sync.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


def test_disabled_without_tty():
    with patch("timecard_sync.services.progress.is_tty_enabled", return_value=False):
        tracker = ProgressTracker(3)
    assert tracker.enabled is False
    assert tracker.pbar is None
    tracker.start_item("Alpha")
    tracker.finish_item()
    tracker.close()
    assert tracker.current == 1


def test_enabled_with_tty_drives_tqdm():
    with patch("timecard_sync.services.progress.is_tty_enabled", return_value=True), patch(
        "timecard_sync.services.progress.tqdm"
    ) as mock_tqdm:
        with ProgressTracker(2, description="Writing rows") as tracker:
            assert tracker.enabled is True
            tracker.start_item("Alpha")
            tracker.finish_item()
            tracker.set_postfix(row=0)
        bar = mock_tqdm.return_value
        mock_tqdm.assert_called_once_with(
            total=2, desc="Writing rows", unit="row", leave=False, ncols=80, ascii=True
        )
        bar.set_description.assert_any_call("Writing rows (Alpha)")
        bar.update.assert_called_once_with(1)
        bar.set_postfix.assert_called_once_with(row=0)
        bar.close.assert_called_once()


def test_zero_total_never_creates_bar():
    with patch("timecard_sync.services.progress.is_tty_enabled", return_value=True), patch(
        "timecard_sync.services.progress.tqdm"
    ) as mock_tqdm:
        tracker = ProgressTracker(0)
    assert tracker.enabled is False
    mock_tqdm.assert_not_called()
