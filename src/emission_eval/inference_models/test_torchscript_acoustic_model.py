import numpy as np
import pytest
import torch

from emission_eval.inference_models.model_registry import model_registry
from emission_eval.utils.errors import ConfigurationError, DataError


class FrameProjection(torch.nn.Module):
    def __init__(self):
        super().__init__()
        self.proj = torch.nn.Linear(3, 5)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.proj(x)


def test_forward_returns_classes_by_frames(tmp_path):
    torch.manual_seed(0)
    module = FrameProjection()
    path = tmp_path / "am.pt"
    torch.jit.save(torch.jit.script(module), str(path))

    model = model_registry["torchscript"]("torchscript", path)
    model.device = "cpu"
    model.load_model()

    features = np.random.default_rng(0).standard_normal((7, 3)).astype(np.float32)
    emission = model.forward(features)

    assert emission.shape == (5, 7)
    with torch.no_grad():
        expected = module(torch.from_numpy(features)).numpy().T
    np.testing.assert_allclose(emission, expected, rtol=1e-5, atol=1e-6)

    with pytest.raises(DataError):
        model.forward(np.zeros(3, dtype=np.float32))


def test_missing_model_file(tmp_path):
    model = model_registry["torchscript"]("torchscript", tmp_path / "missing.pt")
    with pytest.raises(ConfigurationError):
        model.load_model()
