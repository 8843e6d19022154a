import pytest

from downloads.status import ActionState, DownloadState, reconcile
from services.sabnzbd import QueueStatus

IDLE = QueueStatus()


class TestParse:
    @pytest.mark.parametrize("raw", ["downloading", "DOWNLOADING", "Downloading"])
    def test_case_insensitive(self, raw):
        assert DownloadState.parse(raw) == DownloadState.DOWNLOADING

    def test_none_and_unrecognised(self):
        assert DownloadState.parse(None) == DownloadState.UNKNOWN
        assert DownloadState.parse("paused") == DownloadState.UNKNOWN

    def test_upstream_mapping(self):
        assert DownloadState.from_upstream("Extracting") == DownloadState.EXTRACTING
        assert DownloadState.from_upstream("Verifying") is None
        assert DownloadState.from_upstream(None) is None


class TestReconcile:
    def test_nothing_known_is_downloadable(self):
        assert reconcile(IDLE, DownloadState.UNKNOWN, in_storage=False) == ActionState(
            enabled=True, label="Download", variant="ghost",
        )

    @pytest.mark.parametrize("queue,persisted", [
        (QueueStatus(is_in_queue=True), DownloadState.DOWNLOADING),
        (QueueStatus(status=DownloadState.FAILED), DownloadState.FAILED),
        (QueueStatus(is_processing=True, status=DownloadState.EXTRACTING), DownloadState.PROCESSING),
    ])
    def test_storage_always_wins(self, queue, persisted):
        state = reconcile(queue, persisted, in_storage=True)
        assert state.enabled
        assert state.label == "Download from storage"
        assert state.variant == "success"

    def test_failed_in_history(self):
        state = reconcile(QueueStatus(status=DownloadState.FAILED), DownloadState.UNKNOWN, in_storage=False)
        assert not state.enabled
        assert state.label == "Download failed"
        assert state.variant == "destructive"
        assert state.tooltip

    def test_failed_persisted_with_idle_queue(self):
        state = reconcile(IDLE, DownloadState.FAILED, in_storage=False)
        assert not state.enabled
        assert state.label == "Download failed"

    def test_persisted_label_wins_over_live(self):
        queue = QueueStatus(is_processing=True, status=DownloadState.EXTRACTING)
        state = reconcile(queue, DownloadState.QUEUED, in_storage=False)
        assert not state.enabled
        assert state.label == "Queued"
        assert state.variant == "active"

    def test_live_processing_without_persisted(self):
        queue = QueueStatus(is_processing=True, status=DownloadState.RUNNING)
        state = reconcile(queue, DownloadState.UNKNOWN, in_storage=False)
        assert not state.enabled
        assert state.label == "Being extracted"
        assert state.variant == "ghost"

    def test_live_queue_without_persisted(self):
        state = reconcile(QueueStatus(is_in_queue=True), DownloadState.UNKNOWN, in_storage=False)
        assert not state.enabled
        assert state.label == "Downloading"
        assert state.variant == "active"

    def test_persisted_processing_disables(self):
        state = reconcile(IDLE, DownloadState.PROCESSING, in_storage=False)
        assert not state.enabled
        assert state.label == "Preparing download"

    def test_completed_does_not_override(self):
        state = reconcile(IDLE, DownloadState.COMPLETED, in_storage=False)
        assert state.enabled
        assert state.label == "Download"

    def test_submitting(self):
        state = reconcile(IDLE, DownloadState.UNKNOWN, in_storage=False, submitting=True)
        assert not state.enabled
        assert state.label == "Preparing…"

    def test_submitting_outranks_failure(self):
        state = reconcile(QueueStatus(status=DownloadState.FAILED), DownloadState.FAILED, in_storage=False, submitting=True)
        assert not state.enabled
        assert state.label == "Preparing…"
