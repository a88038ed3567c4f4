"""TorchScript classifier loader.

Classifiers take normalized band-energy features of shape (1, T, F) and
return a probability vector. The feature pipeline runs outside the model.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from voice_authenticity.errors import ResourceLoadError

logger = logging.getLogger(__name__)


class LoadedModel:
    """A loaded classifier with explicit lifetime.

    predict() runs under torch.inference_mode so no autograd buffers outlive
    the call; dispose() drops the module and its parameter storage.
    """

    def __init__(self, module, name: str, device: str, output_size: Optional[int] = None):
        self._module = module
        self.name = name
        self.device = device
        self.output_size = output_size

    @property
    def disposed(self) -> bool:
        return self._module is None

    def predict(self, features: np.ndarray) -> np.ndarray:
        """Run the classifier.

        Args:
            features: (T, F) or (1, T, F) float32.

        Returns:
            Probability vector, shape (n_classes,).
        """
        import torch

        if self._module is None:
            raise RuntimeError(f"Model '{self.name}' has been disposed")
        x = np.asarray(features, dtype=np.float32)
        if x.ndim == 2:
            x = x[np.newaxis, ...]
        with torch.inference_mode():
            inputs = torch.from_numpy(np.ascontiguousarray(x)).to(self.device)
            out = self._module(inputs)
            if isinstance(out, (tuple, list)):
                out = out[0]
            probs = out.detach().cpu().numpy().astype(np.float32)
        return probs.reshape(-1)

    def dispose(self) -> None:
        """Release the module and any cached device memory."""
        if self._module is None:
            return
        import torch

        self._module = None
        if self.device.startswith("cuda") and torch.cuda.is_available():
            torch.cuda.empty_cache()
        logger.debug("Disposed model '%s'", self.name)


def load_torchscript_model(
    path: str | Path,
    device: str = "cpu",
    input_shape: Optional[Sequence[int]] = None,
    name: Optional[str] = None,
) -> LoadedModel:
    """Load a TorchScript classifier and check it accepts input_shape.

    Args:
        path: Path to a .pt file saved with torch.jit.save.
        device: 'cpu', 'cuda', ...
        input_shape: Expected input shape (1, T, F); a zero tensor of this
            shape is run once to validate the model and read its output size.
        name: Name used in logs (defaults to the parent directory name).

    Raises:
        ResourceLoadError: file missing, not loadable, or rejects input_shape.
    """
    path = Path(path)
    name = name or path.parent.name or path.stem
    if not path.exists():
        raise ResourceLoadError(f"Model not found: {path}", resource=str(path))

    import torch

    try:
        module = torch.jit.load(str(path), map_location=torch.device(device))
        module.eval()
    except (RuntimeError, ValueError, OSError) as exc:
        raise ResourceLoadError(f"Could not load model {path}: {exc}", resource=str(path)) from exc

    output_size = None
    if input_shape is not None:
        try:
            with torch.inference_mode():
                dummy = torch.zeros(tuple(input_shape), dtype=torch.float32, device=device)
                out = module(dummy)
                if isinstance(out, (tuple, list)):
                    out = out[0]
                output_size = int(out.shape[-1])
        except RuntimeError as exc:
            raise ResourceLoadError(
                f"Model {path} does not accept input shape {list(input_shape)}: {exc}",
                resource=str(path),
            ) from exc

    logger.info("Model '%s' loaded from %s (input %s, %s outputs)", name, path, input_shape, output_size)
    return LoadedModel(module, name=name, device=device, output_size=output_size)
