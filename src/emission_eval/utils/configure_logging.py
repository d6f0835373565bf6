"""
Logging configuration for evaluation runs.

This module provides centralized logging setup for the evaluation pipeline.
"""

import logging
import sys

from rich.logging import RichHandler

from emission_eval.config.evaluation_config import EvaluationConfig

NOISY_LOGGERS = ("datasets", "filelock", "fsspec", "torch")


def configure_logging(config: EvaluationConfig) -> None:
    """
    Configure the global logging system based on the provided EvaluationConfig.

    This function should be called once at the start of the run. Afterwards
    every module simply uses `logging.getLogger(__name__)`.

    Args:
        config: The evaluation configuration containing logging settings
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_level = getattr(logging, config.logging.log_level.upper())
    root_logger.setLevel(log_level)

    handlers = []

    if config.logging.show_terminal_logs:
        if config.logging.use_rich_logging:
            console_handler = RichHandler(
                rich_tracebacks=True, show_time=True, show_path=False
            )
        else:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter(config.logging.log_format))
        console_handler.setLevel(log_level)
        handlers.append(console_handler)

    if config.logging.log_file is not None:
        config.logging.log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(config.logging.log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(config.logging.log_format))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s"
        if config.logging.use_rich_logging
        else config.logging.log_format,
        datefmt="[%X]" if config.logging.use_rich_logging else None,
        handlers=handlers,
        force=True,
    )

    # Loggers created before this call must route through the root handlers
    for logger_name in logging.root.manager.loggerDict:
        logger = logging.getLogger(logger_name)
        logger.handlers.clear()
        logger.propagate = True

    # dataset loading and model tracing are chatty at INFO
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
