from .interpreter import CommandInterpreter, ParsedCommand, ReplyChannel

__all__ = ["CommandInterpreter", "ParsedCommand", "ReplyChannel"]
