"""
Exception hierarchy for the tagging pipeline.
"""


class TaggerError(Exception):
    """Base exception for all tagging pipeline errors."""
    pass


class ConfigError(TaggerError):
    """Bad model/tag paths or malformed tag metadata."""
    pass


class TensorError(TaggerError):
    """Input or output tensor could not be built for a chunk."""
    pass


class InputTensorError(TensorError):
    """The flat input buffer does not fit the resolved input shape."""
    pass


class OutputTensorError(TensorError):
    """The output buffer could not be allocated."""
    pass


class InferenceError(TaggerError):
    """The inference engine call failed."""
    pass


class ResourceError(TaggerError):
    """Engine-side resources could not be released, or were already released."""
    pass
