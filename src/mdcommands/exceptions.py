"""Custom exceptions for mdcommands."""


class MdCommandsError(Exception):
    """Base exception for mdcommands operations."""


class CommandError(MdCommandsError):
    """Error while validating or applying a single command."""


class NodeNotFoundError(CommandError):
    """A referenced node id does not exist, or it is the root where a parent is required."""


class InvalidTargetError(CommandError):
    """The resolved node cannot support the requested operation."""


class UnrecognizedActionError(CommandError):
    """A command's action tag is missing or unknown."""


class InvalidCommandError(CommandError):
    """A command has a known action but malformed fields."""


class MalformedBatchError(MdCommandsError):
    """A command batch could not be decoded into ``{"commands": [...]}``."""


class LLMError(MdCommandsError):
    """Error while calling the text-generation API."""


class PromptTooLargeError(LLMError):
    """Prompt exceeds the configured input token limit."""
