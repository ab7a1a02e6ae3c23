"""
Session runner for CLI integration.

This module wires one sampling session together: it resolves the target
(attach or launch), builds the collectors, sampler and CSV sink, installs the
signal handlers, runs the sampling loop, and turns the outcome into the
process exit status. The optional chart is rendered last.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..collectors import CollectorFactory
from ..models.config import MonitorConfig
from ..models.runtime import SamplingSession, StopReason
from ..monitoring import Sampler
from ..orchestration import ProcessManager, RunState, SamplingLoop, SignalHandler
from ..storage import CsvSink
from ..system.processes import is_pid_alive
from ..validation import TargetNotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Reported for a signal stop when the signal number is unknown (SIGINT).
DEFAULT_INTERRUPTED_STATUS = 130


class MonitorRunner:
    """
    Runs one memmark session against an existing pid or a launched command.
    """

    def __init__(
        self,
        monitor_config: MonitorConfig,
        pid: Optional[int] = None,
        command: Optional[List[str]] = None,
    ):
        """
        Args:
            monitor_config: Effective configuration (file plus CLI overrides)
            pid: Pid to attach to; exclusive with ``command``
            command: Program and arguments to launch; exclusive with ``pid``

        Raises:
            ValidationError: Unless exactly one of ``pid`` and ``command`` is given.
        """
        if pid is not None and command:
            raise ValidationError("--pid is mutually exclusive with command", field_name="--pid")
        if pid is None and not command:
            raise ValidationError("Provide --pid or a command after --", field_name="--pid")

        self.monitor_config = monitor_config
        self.pid = pid
        self.command = list(command) if command else None

        self.state = RunState()
        self.process_manager = ProcessManager(self.state)
        self.signal_handler = SignalHandler(self.state, self.process_manager)
        self.session: Optional[SamplingSession] = None
        self.stop_reason: Optional[StopReason] = None

    @property
    def launch_mode(self) -> bool:
        return self.command is not None

    def _check_attach_target(self) -> None:
        if not is_pid_alive(self.pid):
            raise TargetNotFoundError(f"PID {self.pid} is not running", pid=self.pid)
        logger.info(f"Attaching to PID {self.pid}")

    def _resolve_target(self, sink: CsvSink) -> int:
        """Return the root pid, launching the command in launch mode."""
        if not self.launch_mode:
            return self.pid
        # Keep the child's stdout out of a CSV stream on our stdout.
        child_stdout = None if sink.is_file else sys.stderr
        return self.process_manager.launch(self.command, stdout=child_stdout).pid

    def _exit_status(self, loop: SamplingLoop) -> int:
        if self.launch_mode:
            return loop.child_exit_code if loop.child_exit_code is not None else 0
        if self.stop_reason is StopReason.STOP_REQUESTED:
            if self.state.last_signal is None:
                return DEFAULT_INTERRUPTED_STATUS
            return 128 + self.state.last_signal
        return 0

    def run(self) -> int:
        """
        Run the session to completion.

        Returns:
            The process exit status for this run.

        Raises:
            TargetNotFoundError: If the pid is not alive or the command cannot start.
            ValidationError: If the CSV destination cannot be opened.
        """
        config = self.monitor_config
        if not self.launch_mode:
            self._check_attach_target()

        collectors = CollectorFactory(
            enable_smaps=config.enable_smaps,
            vmmap_timeout_seconds=config.vmmap_timeout_seconds,
        ).create_collectors()

        # Open the sink first so an unwritable destination fails before launch.
        try:
            sink = CsvSink(config.out_path)
        except OSError as e:
            raise ValidationError(
                f"Cannot open output {config.out_path!r}: {e}", field_name="--out", value=config.out_path
            ) from e

        try:
            # Signals must not interrupt the launch: install handlers first.
            self.signal_handler.setup_signal_handlers()
            try:
                root_pid = self._resolve_target(sink)
                self.session = SamplingSession(
                    root_pid=root_pid,
                    owned=self.launch_mode,
                    interval_seconds=config.interval_seconds,
                    duration_seconds=config.duration_seconds,
                    collector_names=[c.name for c in collectors],
                )

                with Sampler(collectors, max_workers=config.collector_workers) as sampler:
                    loop = SamplingLoop(
                        self.session,
                        sampler,
                        sink,
                        self.state,
                        process_manager=self.process_manager if self.launch_mode else None,
                    )
                    self.stop_reason = loop.run()
            except Exception:
                self.process_manager.shutdown()
                raise
            finally:
                self.signal_handler.cleanup_signal_handlers()
        finally:
            sink.close()

        exit_status = self._exit_status(loop)
        logger.info(
            f"Wrote {sink.rows_written} sample(s) to "
            f"{'stdout' if not sink.is_file else config.out_path}; exit status {exit_status}"
        )

        if config.chart_path:
            self._render_chart(sink)

        return exit_status

    def _render_chart(self, sink: CsvSink) -> None:
        if not sink.is_file:
            logger.warning("Cannot render a chart from stdout output; use --out <file>")
            return

        try:
            # Deferred: polars and plotly are only needed when a chart is requested.
            from ..plotter import generate_chart

            written = generate_chart(
                Path(self.monitor_config.out_path), Path(self.monitor_config.chart_path)
            )
        except Exception as e:
            logger.warning(f"Chart rendering unavailable: {e}")
            return

        if written:
            logger.info(f"Chart written to {self.monitor_config.chart_path}")
