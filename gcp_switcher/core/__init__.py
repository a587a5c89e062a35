"""Core state handling: events, the navigation state machine and the reducer."""

from .events import Command, Dispatch, Event, Operation, Quit, StartFallbackTimer
from .model import AppModel
from .reducer import bootstrap, update
from .state_machine import AppState, AppStateMachine, LoadingContext, Trigger, to_dot
from .tracker import CompletionTracker

__all__ = [
    "AppModel",
    "AppState",
    "AppStateMachine",
    "Command",
    "CompletionTracker",
    "Dispatch",
    "Event",
    "LoadingContext",
    "Operation",
    "Quit",
    "StartFallbackTimer",
    "Trigger",
    "bootstrap",
    "to_dot",
    "update",
]
