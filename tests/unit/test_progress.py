from __future__ import annotations

from unittest.mock import Mock, patch

from ssg_upload.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    """Test that is_tty_enabled returns sys.stdout.isatty()."""
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    """Test cases for ProgressTracker class."""

    def test_init_with_tty_enabled(self):
        """Test ProgressTracker initialization when TTY is enabled."""
        with patch('ssg_upload.services.progress.is_tty_enabled', return_value=True), \
             patch('ssg_upload.services.progress.tqdm') as mock_tqdm:

            tracker = ProgressTracker(5, description="Submitting Enrolments")

            assert tracker.total == 5
            assert tracker.description == "Submitting Enrolments"
            assert tracker.completed == 0
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Submitting Enrolments",
                unit="record",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        """No bar is created without a TTY."""
        with patch('ssg_upload.services.progress.is_tty_enabled', return_value=False), \
             patch('ssg_upload.services.progress.tqdm') as mock_tqdm:
            tracker = ProgressTracker(5)

            assert tracker.enabled is False
            assert tracker.pbar is None
            mock_tqdm.assert_not_called()

    def test_advance_counts_failures(self):
        """advance() updates the bar and the ok/failed postfix."""
        mock_pbar = Mock()

        with patch('ssg_upload.services.progress.is_tty_enabled', return_value=True), \
             patch('ssg_upload.services.progress.tqdm', return_value=mock_pbar):

            tracker = ProgressTracker(3)
            tracker.advance(success=True)
            tracker.advance(success=False)

            assert tracker.completed == 2
            assert tracker.failed == 1
            assert mock_pbar.update.call_count == 2
            mock_pbar.set_postfix.assert_called_with(ok=1, failed=1)

    def test_advance_with_tty_disabled(self):
        """Counters still move without a bar."""
        with patch('ssg_upload.services.progress.is_tty_enabled', return_value=False):
            tracker = ProgressTracker(2)
            tracker.advance()
            tracker.advance(success=False)

            assert tracker.completed == 2
            assert tracker.failed == 1

    def test_close_with_tty_enabled(self):
        """Test close when TTY is enabled."""
        mock_pbar = Mock()

        with patch('ssg_upload.services.progress.is_tty_enabled', return_value=True), \
             patch('ssg_upload.services.progress.tqdm', return_value=mock_pbar):

            tracker = ProgressTracker(3)
            tracker.close()
            tracker.close()

            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None

    def test_context_manager(self):
        """Test ProgressTracker as context manager."""
        mock_pbar = Mock()

        with patch('ssg_upload.services.progress.is_tty_enabled', return_value=True), \
             patch('ssg_upload.services.progress.tqdm', return_value=mock_pbar):

            with ProgressTracker(1) as tracker:
                tracker.advance()

            mock_pbar.close.assert_called_once()
