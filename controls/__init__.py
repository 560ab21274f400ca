"""
Sinks for fired actions.
"""

from .action_sink import ActionSink, RecordingActionSink, LoggingActionSink
from .keyboard import KeyboardActionSink

__all__ = ["ActionSink", "RecordingActionSink", "LoggingActionSink", "KeyboardActionSink"]
