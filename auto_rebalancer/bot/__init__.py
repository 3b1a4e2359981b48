"""Bot lifecycle management."""

from .lifecycle import BotCommandResult, BotLifecycleManager, BotStatus, BotStatusReport

__all__ = ['BotCommandResult', 'BotLifecycleManager', 'BotStatus', 'BotStatusReport']
