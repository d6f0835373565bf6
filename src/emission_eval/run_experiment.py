import hydra
from omegaconf import DictConfig

from emission_eval.config.evaluation_config import load_evaluation_config
from emission_eval.evaluation.evaluator import Evaluator
from emission_eval.utils.configure_logging import configure_logging


@hydra.main(config_path="config", config_name="config.yaml", version_base=None)
def run_experiment(cfg: DictConfig):
    evaluation_cfg = load_evaluation_config(cfg)
    configure_logging(evaluation_cfg)
    evaluator = Evaluator.from_config(evaluation_cfg)
    evaluator.run()
    evaluator.save_emissions()


if __name__ == "__main__":
    run_experiment()
