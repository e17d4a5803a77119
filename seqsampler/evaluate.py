import logging

import hydra
import torch
from jaxtyping import install_import_hook
from omegaconf import DictConfig

# Configure beartype and jaxtyping.
with install_import_hook(
    ("seqsampler",),
    ("beartype", "beartype"),
):
    from .config.common import get_typed_root_config
    from .config.evaluate import EvaluateCfg
    from .data_source import get_data_source
    from .dataset.dataset_sampled import get_labels
    from .evaluation import (
        compute_average_precisions,
        compute_group_mean_average_precisions,
        compute_mean_average_precision,
        load_video_groups,
    )

logger = logging.getLogger(__name__)


@hydra.main(
    version_base=None,
    config_path="../config",
    config_name="evaluate",
)
def evaluate(cfg_dict: DictConfig) -> None:
    cfg = get_typed_root_config(cfg_dict, EvaluateCfg)
    data_source = get_data_source(cfg.data_source)

    saved = torch.load(cfg.predictions)
    keys = saved["keys"]
    predictions = saved["predictions"].float()
    assert predictions.shape == (len(keys), data_source.num_labels())

    # Treat the keys as a single step of a batch to look up their labels.
    groundtruth = get_labels([keys], data_source)[0]

    average_precisions = compute_average_precisions(predictions, groundtruth)
    for label, average_precision in enumerate(average_precisions.tolist(), start=1):
        logger.info(f"Class {label}\t AP: {average_precision:.5f}")
    mean_average_precision = compute_mean_average_precision(predictions, groundtruth)
    logger.info(f"mAP: {mean_average_precision:.5f}")

    if cfg.val_groups is not None:
        groups = load_video_groups(cfg.val_groups)
        group_maps = compute_group_mean_average_precisions(
            keys, predictions, groundtruth, groups
        )
        for index, group_map in enumerate(group_maps.tolist(), start=1):
            logger.info(f"Group {index} mAP: {group_map:.5f}")
        valid = group_maps[group_maps >= 0]
        if valid.numel() > 1:
            logger.info(f"Group mAPs STD: {valid.std().item():.5f}")


if __name__ == "__main__":
    evaluate()
