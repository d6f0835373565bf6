from typing import Dict, Type

from emission_eval.datasets.evaluation_dataset_base import EvaluationDatasetBase
from emission_eval.datasets.parquet_feature_dataset import ParquetFeatureDataset

# Registry mapping dataset types to their corresponding dataset classes
dataset_registry: Dict[str, Type[EvaluationDatasetBase]] = {
    "parquet_features": ParquetFeatureDataset,
}
