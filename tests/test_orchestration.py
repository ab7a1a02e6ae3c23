"""
Tests for signal escalation and launched-command lifecycle.
"""

import signal
import subprocess
import sys
from unittest.mock import Mock, patch

import pytest

from memmark.orchestration import (
    ProcessManager,
    RunState,
    SignalHandler,
    exit_status_from_returncode,
)
from memmark.validation import TargetNotFoundError


@pytest.mark.unit
class TestRunState:
    def test_record_signal_counts_and_requests_stop(self):
        state = RunState()

        assert state.record_signal(signal.SIGTERM) == 1
        assert state.record_signal(signal.SIGINT) == 2
        assert state.stop_requested
        assert state.last_signal == signal.SIGINT

    def test_request_stop_is_not_a_signal(self):
        state = RunState()
        state.request_stop()
        assert state.stop_requested
        assert state.signal_count == 0


@pytest.mark.unit
class TestExitStatus:
    @pytest.mark.parametrize(
        "returncode,expected",
        [(0, 0), (7, 7), (-signal.SIGTERM, 128 + signal.SIGTERM), (-signal.SIGKILL, 137)],
    )
    def test_mapping(self, returncode, expected):
        assert exit_status_from_returncode(returncode) == expected


@pytest.mark.unit
class TestSignalHandler:
    """Escalation of repeated stop signals."""

    def _launch_mode_handler(self):
        state = RunState()
        process_manager = Mock()
        process_manager.process = Mock(pid=321)
        exit_func = Mock()
        handler = SignalHandler(state, process_manager, exit_func=exit_func)
        return handler, state, process_manager, exit_func

    def test_first_signal_terminates_child(self):
        handler, state, process_manager, exit_func = self._launch_mode_handler()

        handler.handle_signal(signal.SIGINT, None)

        assert state.stop_requested
        process_manager.escalate.assert_called_once_with(1)
        exit_func.assert_not_called()

    def test_second_signal_kills_child(self):
        handler, _, process_manager, exit_func = self._launch_mode_handler()

        handler.handle_signal(signal.SIGINT, None)
        handler.handle_signal(signal.SIGINT, None)

        assert [c.args for c in process_manager.escalate.call_args_list] == [(1,), (2,)]
        exit_func.assert_not_called()

    def test_third_signal_exits_immediately(self):
        handler, _, process_manager, exit_func = self._launch_mode_handler()

        for _ in range(3):
            handler.handle_signal(signal.SIGTERM, None)

        exit_func.assert_called_once_with(128 + signal.SIGTERM)
        assert process_manager.escalate.call_count == 2

    def test_attach_mode_never_signals_target(self):
        state = RunState()
        process_manager = ProcessManager(state)
        exit_func = Mock()
        handler = SignalHandler(state, process_manager, exit_func=exit_func)

        with patch.object(process_manager, "escalate") as mock_escalate:
            handler.handle_signal(signal.SIGINT, None)
            handler.handle_signal(signal.SIGINT, None)

        mock_escalate.assert_not_called()
        assert state.stop_requested
        exit_func.assert_not_called()

    def test_setup_and_cleanup_restore_handlers(self):
        original_int = signal.getsignal(signal.SIGINT)
        original_term = signal.getsignal(signal.SIGTERM)
        handler = SignalHandler(RunState())

        handler.setup_signal_handlers()
        try:
            assert signal.getsignal(signal.SIGINT) == handler.handle_signal
            assert signal.getsignal(signal.SIGTERM) == handler.handle_signal
        finally:
            handler.cleanup_signal_handlers()

        assert signal.getsignal(signal.SIGINT) == original_int
        assert signal.getsignal(signal.SIGTERM) == original_term

    def test_cleanup_without_setup_is_noop(self):
        SignalHandler(RunState()).cleanup_signal_handlers()


@pytest.mark.integration
class TestProcessManager:
    """Launching and reaping real child processes."""

    def test_launch_and_wait_returns_exit_code(self):
        state = RunState()
        manager = ProcessManager(state)

        process = manager.launch([sys.executable, "-c", "import sys; sys.exit(7)"])

        assert state.owned_process is process
        assert manager.wait() == 7
        assert not manager.is_running()

    def test_terminate_maps_to_signal_status(self):
        manager = ProcessManager(RunState())
        manager.launch([sys.executable, "-c", "import time; time.sleep(30)"])
        assert manager.is_running()

        manager.escalate(1)

        assert manager.wait() == 128 + signal.SIGTERM

    def test_kill_maps_to_signal_status(self):
        manager = ProcessManager(RunState())
        manager.launch([sys.executable, "-c", "import time; time.sleep(30)"])

        manager.escalate(2)

        assert manager.wait() == 128 + signal.SIGKILL

    def test_signal_after_exit_is_harmless(self):
        manager = ProcessManager(RunState())
        manager.launch([sys.executable, "-c", "pass"])
        assert manager.wait() == 0

        manager.terminate()
        manager.kill()

    def test_missing_program_is_target_not_found(self):
        manager = ProcessManager(RunState())

        with pytest.raises(TargetNotFoundError):
            manager.launch(["memmark-definitely-not-a-program"])

        assert manager.process is None
        assert manager.wait() is None

    def test_shutdown_stops_running_child(self):
        manager = ProcessManager(RunState())
        process = manager.launch([sys.executable, "-c", "import time; time.sleep(30)"])

        manager.shutdown()

        assert process.poll() is not None

    def test_child_stdout_can_be_redirected(self):
        manager = ProcessManager(RunState())
        process = manager.launch(
            [sys.executable, "-c", "print('hello')"], stdout=subprocess.PIPE
        )
        output, _ = process.communicate()

        assert output.strip() == b"hello"

    def test_stop_requested_before_launch_terminates_child(self):
        state = RunState()
        state.record_signal(signal.SIGINT)
        manager = ProcessManager(state)

        manager.launch([sys.executable, "-c", "import time; time.sleep(30)"])

        assert manager.wait() == 128 + signal.SIGTERM
