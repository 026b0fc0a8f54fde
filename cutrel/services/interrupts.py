"""Tier-aware interrupt routing.

SIGINT and SIGTERM are turned into ``ReleaseInterrupted``, which carries the
failure policy in force when the signal arrived. The router holds no policy
of its own: it asks a resolver at signal time, and the pipeline resolves from
the session's tier. The tier flag is the only state a transition changes.
"""

from __future__ import annotations

import signal
from collections.abc import Callable
from types import FrameType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cutrel.services.recovery import FailurePolicy


class ReleaseInterrupted(BaseException):
    """Raised from the signal handler; unwinds the running stage.

    Derives from BaseException like KeyboardInterrupt, so a broad
    ``except Exception`` inside a stage cannot swallow it.
    """

    def __init__(self, signum: int, policy: FailurePolicy) -> None:
        super().__init__(signal.Signals(signum).name)
        self.signum = signum
        self.policy = policy

    @property
    def signal_name(self) -> str:
        return signal.Signals(self.signum).name


class InterruptRouter:
    """Installs the release signal handlers for the duration of a run.

    Only the first signal is routed. Later signals are ignored so they
    cannot cut a rollback short.
    """

    signals: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)

    def __init__(self) -> None:
        self._resolve: Callable[[], FailurePolicy | None] = _unbound
        self._fired = False
        self._previous: dict[signal.Signals, Any] = {}

    def follow(self, resolve: Callable[[], FailurePolicy | None]) -> None:
        """Route signals to whatever ``resolve`` returns when they arrive.

        A None result means no release is under way yet, and the signal is
        delivered as a plain KeyboardInterrupt.
        """
        self._resolve = resolve

    def install(self) -> None:
        for sig in self.signals:
            self._previous[sig] = signal.getsignal(sig)
            signal.signal(sig, self._on_signal)

    def uninstall(self) -> None:
        for sig, previous in self._previous.items():
            signal.signal(sig, previous)
        self._previous.clear()

    def __enter__(self) -> InterruptRouter:
        self.install()
        return self

    def __exit__(self, *exc: object) -> None:
        self.uninstall()

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        del frame
        if self._fired:
            return
        policy = self._resolve()
        if policy is None:
            raise KeyboardInterrupt
        self._fired = True
        raise ReleaseInterrupted(signum, policy)


def _unbound() -> FailurePolicy | None:
    return None
