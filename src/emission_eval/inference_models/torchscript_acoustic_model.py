from logging import getLogger
from pathlib import Path

import numpy as np
import torch

from emission_eval.inference_models.acoustic_model_base import AcousticModelBase
from emission_eval.utils.errors import ConfigurationError, DataError


class TorchScriptAcousticModel(AcousticModelBase):
    """
    Acoustic model exported with `torch.jit.save`.

    The scripted module takes a `batch x frames x features` float tensor and
    returns `batch x frames x classes` scores. Evaluation runs with batch
    size 1, the output is returned transposed to `classes x frames`.
    """

    def __init__(self, model_name: str, model_path: Path):
        super().__init__(model_name, model_path)
        self._log = getLogger(__name__)
        self.model = None

    def load_model(self):
        if not Path(self.model_path).exists():
            raise ConfigurationError(f"Acoustic model not found: {self.model_path}")
        self._log.info(f"Loading acoustic model from {self.model_path}")
        self.model = torch.jit.load(str(self.model_path), map_location=self.device)
        self.model.eval()
        num_params = sum(p.numel() for p in self.model.parameters())
        self._log.info(f"Number of params: {num_params}")

    def forward(self, features: np.ndarray) -> np.ndarray:
        if self.model is None:
            raise RuntimeError("load_model() must be called before forward()")
        features = np.asarray(features, dtype=np.float32)
        if features.ndim != 2:
            raise DataError(
                f"Expected frames x features input, got shape {features.shape}"
            )

        inputs = torch.from_numpy(features).unsqueeze(0).to(self.device)
        with torch.no_grad():
            output = self.model(inputs)
        if output.dim() != 3 or output.shape[0] != 1:
            raise DataError(
                f"Expected 1 x frames x classes output, got {tuple(output.shape)}"
            )
        return output[0].transpose(0, 1).float().cpu().numpy()
