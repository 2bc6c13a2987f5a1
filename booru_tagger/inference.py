"""
Inference engine boundary and per-chunk tensor ownership.
"""

from typing import List, Optional, Sequence, Tuple
import numpy as np

from .batching import DYNAMIC_DIM
from .errors import InferenceError, InputTensorError, OutputTensorError, ResourceError
from .logging import get_logger


def normalize_dims(dims: Sequence) -> Tuple[int, ...]:
    """Map symbolic dimensions (names, None, negatives) to -1."""
    return tuple(
        int(d) if isinstance(d, (int, np.integer)) and d >= 0 else DYNAMIC_DIM
        for d in dims
    )


class InferenceEngine:
    """Base class for inference engines: a tensor in, a tensor out."""

    input_shape: Tuple[int, ...] = ()
    output_shape: Tuple[int, ...] = ()

    def run(self, inputs: np.ndarray, outputs: np.ndarray) -> None:
        """Run the model on inputs, writing results into outputs. Must be implemented by subclasses."""
        raise NotImplementedError

    def close(self) -> None:
        """Release engine-side resources."""
        pass


class OnnxInferenceEngine(InferenceEngine):
    """Inference engine backed by an ONNX Runtime session."""

    def __init__(self, model_path: str, providers: Optional[List[str]] = None):
        import onnxruntime as ort

        self.logger = get_logger("inference")
        self.model_path = model_path
        self.session = ort.InferenceSession(model_path, providers=providers or ["CPUExecutionProvider"])

        model_input = self.session.get_inputs()[0]
        model_output = self.session.get_outputs()[0]
        self.input_name = model_input.name
        self.output_name = model_output.name
        self.input_shape = normalize_dims(model_input.shape)
        self.output_shape = normalize_dims(model_output.shape)

        self.logger.info(
            f"Loaded {model_path} using {self.session.get_providers()[0]} | "
            f"input {self.input_shape}, output {self.output_shape}"
        )

    def run(self, inputs: np.ndarray, outputs: np.ndarray) -> None:
        if self.session is None:
            raise ResourceError(f"ONNX session for {self.model_path} is closed")

        binding = self.session.io_binding()
        try:
            binding.bind_cpu_input(self.input_name, inputs)
            binding.bind_output(
                self.output_name,
                "cpu",
                0,
                np.float32,
                list(outputs.shape),
                outputs.ctypes.data,
            )
            self.session.run_with_iobinding(binding)
        finally:
            binding.clear_binding_inputs()
            binding.clear_binding_outputs()

    def close(self) -> None:
        self.session = None


class ChunkTensors:
    """
    Input and output buffers for one chunk.

    Used as a context manager: both buffers are dropped on exit, whether the
    inference call succeeded or not.
    """

    def __init__(self, flat_input: np.ndarray, input_shape: Sequence[int], output_shape: Sequence[int]):
        self.input_shape = tuple(input_shape)
        self.output_shape = tuple(output_shape)
        self.inputs: Optional[np.ndarray] = None
        self.outputs: Optional[np.ndarray] = None

        try:
            self.inputs = np.ascontiguousarray(flat_input, dtype=np.float32).reshape(self.input_shape)
        except ValueError as e:
            raise InputTensorError(
                f"Cannot build input tensor of shape {self.input_shape} from {np.size(flat_input)} values: {e}"
            ) from e

        try:
            self.outputs = np.zeros(self.output_shape, dtype=np.float32)
        except (ValueError, MemoryError) as e:
            self.release()
            raise OutputTensorError(f"Cannot allocate output tensor of shape {self.output_shape}: {e}") from e

    def run(self, engine: InferenceEngine) -> np.ndarray:
        """Run engine on this chunk and return the flat output buffer."""
        try:
            engine.run(self.inputs, self.outputs)
        except ResourceError:
            raise
        except Exception as e:
            raise InferenceError(f"Inference failed for input shape {self.input_shape}: {e}") from e
        return self.outputs.reshape(-1)

    def release(self) -> None:
        self.inputs = None
        self.outputs = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
