from dataclasses import dataclass

import torch
from lightning.pytorch import LightningDataModule
from torch import Generator
from torch.utils.data import DataLoader

from ..data_source import DataSource
from ..sampler import SamplerCfg, get_sampler
from .dataset_sampled import DatasetSampled
from .types import Stage


@dataclass
class DataLoaderStageCfg:
    sampler: SamplerCfg
    batch_size: int
    num_batches: int
    seed: int | None


@dataclass
class DataModuleSampledCfg:
    train: DataLoaderStageCfg
    val: DataLoaderStageCfg


class DataModuleSampled(LightningDataModule):
    datasets: dict[Stage, DatasetSampled]

    def __init__(
        self,
        data_source: DataSource,
        data_module_cfg: DataModuleSampledCfg,
        global_rank: int = 0,
    ) -> None:
        super().__init__()
        self.data_source = data_source
        self.data_module_cfg = data_module_cfg
        self.global_rank = global_rank
        self.datasets = {}

    def get_generator(self, loader_cfg: DataLoaderStageCfg) -> torch.Generator | None:
        if loader_cfg.seed is None:
            return None
        generator = Generator()
        generator.manual_seed(loader_cfg.seed + self.global_rank)
        return generator

    def get_dataset(self, stage: Stage) -> DatasetSampled:
        # Samplers are stateful, so each stage keeps its sampler across epochs.
        if stage not in self.datasets:
            loader_cfg = self.get_loader_cfg(stage)
            sampler = get_sampler(
                loader_cfg.sampler,
                self.data_source,
                self.get_generator(loader_cfg),
            )
            self.datasets[stage] = DatasetSampled(
                sampler,
                self.data_source,
                loader_cfg.batch_size,
                loader_cfg.num_batches,
            )
        return self.datasets[stage]

    def get_loader_cfg(self, stage: Stage) -> DataLoaderStageCfg:
        if stage == "train":
            return self.data_module_cfg.train
        return self.data_module_cfg.val

    def get_dataloader(self, stage: Stage) -> DataLoader:
        # The dataset yields whole batches. Worker processes would each get a copy of
        # the sampler and repeat its output, so loading happens in the main process.
        return DataLoader(self.get_dataset(stage), batch_size=None, num_workers=0)

    def train_dataloader(self):
        return self.get_dataloader("train")

    def val_dataloader(self):
        return self.get_dataloader("val")
