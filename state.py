from dataclasses import dataclass, replace
from enum import Enum


class Phase(Enum):
    IDLE = "idle"
    STARTING = "starting"
    CONNECTED = "connected"
    RECONNECT_PENDING = "reconnect_pending"
    STOPPED = "stopped"


class Trigger(Enum):
    START = "start"
    REPLAY = "replay"
    POLL = "poll"
    DAY_CHANGED = "day_changed"
    FOLDER_CHANGED = "folder_changed"
    CONNECTED = "connected"
    CONNECT_FAILED = "connect_failed"
    TRUNCATED = "truncated"
    READ_FAILED = "read_failed"
    STOP = "stop"


class Effect(Enum):
    RELEASE = "release"
    CONNECT = "connect"
    READ = "read"
    SCHEDULE = "schedule"
    CANCEL = "cancel"


@dataclass(frozen=True)
class TailState:
    phase: Phase = Phase.IDLE
    # next successful connect skips what is already in the file
    seek_to_end: bool = False

    @property
    def running(self) -> bool:
        return self.phase not in (Phase.IDLE, Phase.STOPPED)


_WAITING = (Phase.STARTING, Phase.RECONNECT_PENDING)


def transition(state: TailState, trigger: Trigger) -> tuple[TailState, tuple[Effect, ...]]:
    """Next state and the side effects the driver has to run, in order."""
    if trigger is Trigger.START:
        return TailState(Phase.STARTING, True), (Effect.RELEASE, Effect.SCHEDULE)
    if trigger is Trigger.REPLAY:
        return TailState(Phase.STARTING, False), (Effect.RELEASE, Effect.SCHEDULE)
    if trigger is Trigger.STOP:
        return TailState(Phase.STOPPED, False), (Effect.CANCEL, Effect.RELEASE)

    if state.phase is Phase.CONNECTED:
        if trigger is Trigger.POLL:
            return state, (Effect.READ,)
        if trigger in (Trigger.DAY_CHANGED, Trigger.TRUNCATED, Trigger.READ_FAILED):
            return replace(state, phase=Phase.RECONNECT_PENDING), (Effect.RELEASE,)
        if trigger is Trigger.FOLDER_CHANGED:
            return TailState(Phase.RECONNECT_PENDING, True), (Effect.RELEASE,)
        return state, ()

    if state.phase in _WAITING:
        if trigger is Trigger.POLL:
            return state, (Effect.CONNECT,)
        if trigger is Trigger.CONNECTED:
            return TailState(Phase.CONNECTED, False), (Effect.READ,)
        return state, ()

    return state, ()
