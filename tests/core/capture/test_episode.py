"""Tests for the debounced episode state machine."""

from suggestion_meter.configs.system import CaptureConfig
from suggestion_meter.core.capture.episode import EpisodeStateMachine
from suggestion_meter.core.capture.models import CaptureState, EditEvent

SUGGESTION = EditEvent(inserted_text="return value", span_is_multi_line=True)
KEYSTROKE = EditEvent(inserted_text="x")


def _machine(timers, flushes, **config):
    config.setdefault("debounce_ms", 2000)

    def on_flush(base, final, edits):
        flushes.append((timers.now, base, final, edits))

    return EpisodeStateMachine(CaptureConfig(**config), timers, on_flush, "v0")


# =========================================================================
# Opening and extending episodes
# =========================================================================


class TestOnEdit:
    def test_starts_idle(self, timers):
        machine = _machine(timers, [])
        assert machine.state is CaptureState.IDLE
        assert machine.previous_text == "v0"

    def test_significant_edit_opens_episode(self, timers):
        machine = _machine(timers, [])
        assert machine.on_edit(SUGGESTION, "v1") is True
        assert machine.state is CaptureState.CAPTURING
        assert machine.episode.base_text == "v0"
        assert machine.episode.final_text == "v1"
        assert timers.pending == 1

    def test_base_captured_once(self, timers):
        machine = _machine(timers, [])
        machine.on_edit(SUGGESTION, "v1")
        machine.on_edit(SUGGESTION, "v2")
        assert machine.episode.base_text == "v0"
        assert machine.episode.final_text == "v2"
        assert machine.episode.edit_count == 2

    def test_explicit_prior_text_wins(self, timers):
        machine = _machine(timers, [])
        machine.on_edit(SUGGESTION, "v1", prior_text="host-prior")
        assert machine.episode.base_text == "host-prior"

    def test_insignificant_edits_never_open_episode(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        for i in range(10):
            assert machine.on_edit(KEYSTROKE, f"v{i + 1}") is False
        timers.advance(10_000)
        assert machine.state is CaptureState.IDLE
        assert timers.started == 0
        assert flushes == []

    def test_prior_text_tracks_every_edit(self, timers):
        machine = _machine(timers, [])
        machine.on_edit(KEYSTROKE, "typed")
        machine.on_edit(SUGGESTION, "suggested")
        assert machine.episode.base_text == "typed"
        assert machine.previous_text == "suggested"

    def test_insignificant_edit_does_not_reset_timer(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        machine.on_edit(SUGGESTION, "v1")
        timers.advance(1500)
        machine.on_edit(KEYSTROKE, "v2")
        timers.advance(500)
        assert [f[0] for f in flushes] == [2000]
        # Keystroke text is not part of the episode.
        assert flushes[0][2] == "v1"

    def test_multi_change_notification(self, timers):
        machine = _machine(timers, [])
        assert machine.on_edit([KEYSTROKE, SUGGESTION], "v1") is True


# =========================================================================
# Debounce and flush
# =========================================================================


class TestDebounce:
    def test_single_flush_after_quiet_period(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        machine.on_edit(SUGGESTION, "v1")  # t=0
        timers.advance(500)
        machine.on_edit(SUGGESTION, "v2")  # t=500
        timers.advance(1999)
        assert flushes == []
        timers.advance(1)
        assert flushes == [(2500, "v0", "v2", 2)]
        timers.advance(10_000)
        assert len(flushes) == 1

    def test_burst_collapses_into_one_episode(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        for i, delay in enumerate((0, 100, 100)):
            timers.advance(delay)
            machine.on_edit(SUGGESTION, f"v{i + 1}")
        timers.advance(2000)
        assert flushes == [(2200, "v0", "v3", 3)]

    def test_separate_episodes(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        machine.on_edit(SUGGESTION, "v1")
        timers.advance(3000)
        machine.on_edit(SUGGESTION, "v2")
        timers.advance(3000)
        assert [(base, final) for _, base, final, _ in flushes] == [
            ("v0", "v1"),
            ("v1", "v2"),
        ]


class TestFlush:
    def test_flush_when_idle_is_noop(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        machine.flush()
        assert flushes == []
        assert machine.state is CaptureState.IDLE

    def test_flush_clears_state_and_timer(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        machine.on_edit(SUGGESTION, "v1")
        machine.flush()
        assert flushes == [(0, "v0", "v1", 1)]
        assert machine.state is CaptureState.IDLE
        assert machine.episode.base_text is None
        assert machine.episode.final_text is None
        assert timers.pending == 0

    def test_state_cleared_before_handler_runs(self, timers):
        states = []

        def on_flush(base, final, edits):
            states.append(machine.state)

        machine = EpisodeStateMachine(CaptureConfig(), timers, on_flush)
        machine.on_edit(SUGGESTION, "v1")
        machine.flush()
        assert states == [CaptureState.IDLE]

    def test_handler_error_does_not_escape(self, timers):
        def on_flush(base, final, edits):
            raise RuntimeError("boom")

        machine = EpisodeStateMachine(CaptureConfig(), timers, on_flush)
        machine.on_edit(SUGGESTION, "v1")
        timers.advance(CaptureConfig().debounce_ms)
        assert machine.state is CaptureState.IDLE

        # The machine keeps working after a failed flush.
        machine.on_edit(SUGGESTION, "v2")
        assert machine.state is CaptureState.CAPTURING


class TestReset:
    def test_reset_abandons_open_episode(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        machine.on_edit(SUGGESTION, "v1")
        assert machine.reset("other document") is True
        timers.advance(10_000)
        assert flushes == []
        assert machine.state is CaptureState.IDLE
        assert machine.previous_text == "other document"

    def test_reset_when_idle(self, timers):
        machine = _machine(timers, [])
        assert machine.reset("text") is False
        assert machine.previous_text == "text"

    def test_track_keeps_open_episode(self, timers):
        flushes = []
        machine = _machine(timers, flushes)
        machine.on_edit(SUGGESTION, "v1")
        machine.track("v2")
        assert machine.previous_text == "v2"
        assert machine.state is CaptureState.CAPTURING
