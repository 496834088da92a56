# origaspect/services/process/subprocess_runner.py
from __future__ import annotations

import os
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from origaspect.common.logging import get_logger
from origaspect.common.probe.cropdetect_helpers import format_cmd
from origaspect.domain.dataclasses.process import ProcessResult
from origaspect.domain.ports.process import ProcessRunnerPort

logger = get_logger(__name__)

_POLL_SEC = 0.1
_KILL_GRACE_SEC = 5.0


@dataclass(frozen=True)
class ProcessLaunchError(RuntimeError):
    """The child process could not be started at all."""
    message: str
    cmd: Optional[str] = None

    def __str__(self) -> str:
        return self.message


def _popen_kwargs() -> dict:
    # own process group / no console window, so the whole tree can be killed
    if os.name == "nt":
        flags = getattr(subprocess, "CREATE_NO_WINDOW", 0) | getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
        return {"creationflags": flags}
    return {"start_new_session": True}


def _kill_tree(proc: subprocess.Popen) -> None:
    if os.name == "nt":
        if proc.poll() is None:
            # taskkill /T walks the child tree
            subprocess.run(
                ["taskkill", "/F", "/T", "/PID", str(proc.pid)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
    else:
        # start_new_session=True makes the child its own group leader (pgid == pid)
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except OSError:
            pass
    if proc.poll() is None:
        try:
            proc.kill()
        except OSError:
            pass


class SubprocessRunner(ProcessRunnerPort):
    """
    Runs a command without a shell, discards stdout and feeds stderr to a
    callback one line at a time.

    run() returns only after stderr hit EOF and the process was reaped. A
    watcher thread kills the process tree when `cancel_event` is set or
    `timeout_sec` elapses; killing closes stderr, which ends the read loop.
    """

    def __init__(self, poll_interval_sec: float = _POLL_SEC):
        self.poll_interval_sec = poll_interval_sec

    def run(
        self,
        cmd: Sequence[str],
        on_stderr_line: Callable[[str], None],
        *,
        cancel_event: Optional[threading.Event] = None,
        timeout_sec: Optional[float] = None,
    ) -> ProcessResult:
        if cancel_event is not None and cancel_event.is_set():
            return ProcessResult(returncode=-1, cancelled=True)

        argv = [str(p) for p in cmd]
        logger.debug("spawn: %s", format_cmd(argv))
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                **_popen_kwargs(),
            )
        except OSError as e:
            raise ProcessLaunchError(f"Failed to start {argv[0]}: {e}", cmd=format_cmd(argv)) from e

        finished = threading.Event()
        stop_reason: list[str] = []

        def _watch() -> None:
            deadline = time.monotonic() + timeout_sec if timeout_sec else None
            while not finished.is_set():
                if cancel_event is not None and cancel_event.is_set():
                    stop_reason.append("cancelled")
                    break
                if deadline is not None and time.monotonic() >= deadline:
                    stop_reason.append("timed_out")
                    break
                finished.wait(self.poll_interval_sec)
            else:
                return
            logger.warning("Killing pid %s (%s)", proc.pid, stop_reason[0])
            _kill_tree(proc)

        watcher = threading.Thread(target=_watch, name=f"proc-watch-{proc.pid}", daemon=True)
        watcher.start()

        try:
            assert proc.stderr is not None
            for raw in proc.stderr:
                on_stderr_line(raw.rstrip("\r\n"))
            returncode = proc.wait()
        except BaseException:
            _kill_tree(proc)
            try:
                proc.wait(timeout=_KILL_GRACE_SEC)
            except subprocess.TimeoutExpired:
                logger.error("pid %s did not exit after kill", proc.pid)
            raise
        finally:
            finished.set()
            watcher.join(timeout=_KILL_GRACE_SEC)
            if proc.stderr is not None:
                proc.stderr.close()

        reason = stop_reason[0] if stop_reason else None
        if reason:
            return ProcessResult(
                returncode=returncode if returncode != 0 else -1,
                cancelled=reason == "cancelled",
                timed_out=reason == "timed_out",
            )
        return ProcessResult(returncode=returncode)
