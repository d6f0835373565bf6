from abc import ABC, abstractmethod
from pathlib import Path

import numpy as np
import torch


class AcousticModelBase(ABC):
    model_name: str
    model_path: Path
    device: str

    @abstractmethod
    def __init__(self, model_name: str, model_path: Path):
        self.model_name = model_name
        self.model_path = model_path
        self.device = (
            "cuda"
            if torch.cuda.is_available()
            else "mps"
            if torch.backends.mps.is_available()
            else "cpu"
        )

    @abstractmethod
    def load_model(self):
        pass

    @abstractmethod
    def forward(self, features: np.ndarray) -> np.ndarray:
        """Emission scores of one utterance as a `classes x frames` matrix."""
        pass
