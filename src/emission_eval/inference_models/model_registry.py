from typing import Dict, Type

from emission_eval.inference_models.acoustic_model_base import AcousticModelBase
from emission_eval.inference_models.torchscript_acoustic_model import (
    TorchScriptAcousticModel,
)

model_registry: Dict[str, Type[AcousticModelBase]] = {
    "torchscript": TorchScriptAcousticModel,
}
