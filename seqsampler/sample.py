import json
import logging
from pathlib import Path

import hydra
import torch
from hydra.core.hydra_config import HydraConfig
from jaxtyping import install_import_hook
from omegaconf import DictConfig
from tqdm import tqdm

# Configure beartype and jaxtyping.
with install_import_hook(
    ("seqsampler",),
    ("beartype", "beartype"),
):
    from .config.common import get_typed_root_config
    from .config.sample import SampleCfg
    from .data_source import get_data_source
    from .dataset.data_module import DataModuleSampled

logger = logging.getLogger(__name__)


@hydra.main(
    version_base=None,
    config_path="../config",
    config_name="sample",
)
def sample(cfg_dict: DictConfig) -> None:
    cfg = get_typed_root_config(cfg_dict, SampleCfg)
    data_source = get_data_source(cfg.data_source)
    data_module = DataModuleSampled(data_source, cfg.data_module)
    if cfg.stage == "train":
        data_loader = data_module.train_dataloader()
    else:
        data_loader = data_module.val_dataloader()

    sampler = data_module.get_dataset(cfg.stage).sampler
    logger.info(
        f"Sampling with {type(sampler).__name__} ({sampler.num_samples()} samples per "
        "epoch)."
    )

    # Count the labels of the last frame of each sequence, which is the frame that
    # gets predicted.
    batches = []
    label_counts = torch.zeros(data_source.num_labels(), dtype=torch.int64)
    for batch in tqdm(data_loader, desc=f"Sampling {cfg.stage} batches"):
        batches.append(batch["keys"])
        label_counts += batch["labels"][-1].sum(dim=0)

    for label, count in enumerate(label_counts.tolist(), start=1):
        logger.info(f"Label {label}: {count} sequences")

    if cfg.output_path is None:
        output_path = Path(HydraConfig.get().runtime.output_dir) / "batches.json"
    else:
        output_path = cfg.output_path
    output_path.parent.mkdir(exist_ok=True, parents=True)
    with output_path.open("w") as f:
        json.dump(batches, f)
    logger.info(f"Wrote {len(batches)} batches to {output_path}.")


if __name__ == "__main__":
    sample()
