import logging
from dataclasses import dataclass
from typing import Literal

import torch

from ..data_source import DataSource
from ..misc.frame_key import FrameKey
from .sampler import (
    BatchKeys,
    Sampler,
    SamplerCfgCommon,
    SamplerConfigError,
    filter_boundary_frames,
    flatten_video_keys,
)

logger = logging.getLogger(__name__)


@dataclass
class SamplerPermutedCfg(SamplerCfgCommon):
    name: Literal["permuted"]

    # If true, sample each frame i.i.d. with replacement. If false, do not re-sample a
    # frame until all other frames have been sampled.
    replace: bool = False


class SamplerPermuted(Sampler[SamplerPermutedCfg]):
    keys: list[FrameKey]
    key_order: list[int]
    key_index: int

    def __init__(
        self,
        cfg: SamplerPermutedCfg,
        data_source: DataSource,
        generator: torch.Generator | None = None,
    ) -> None:
        super().__init__(cfg, data_source, generator)
        if cfg.use_boundary_frames:
            self.keys = flatten_video_keys(self.video_keys)
        else:
            self.keys = filter_boundary_frames(
                self.video_keys, cfg.sequence_length, cfg.step_size
            )
        if not self.keys:
            raise SamplerConfigError(
                "No video is long enough to hold a sequence of length "
                f"{cfg.sequence_length} with step size {cfg.step_size}."
            )
        self.refresh_keys()

    def refresh_keys(self) -> None:
        num_keys = len(self.keys)
        if self.cfg.replace:
            order = torch.multinomial(
                torch.ones(num_keys),
                num_keys,
                replacement=True,
                generator=self.generator,
            )
        else:
            order = torch.randperm(num_keys, generator=self.generator)
        self.key_order = order.tolist()
        self.key_index = 0

    def sample_keys(self, num_sequences: int) -> BatchKeys:
        batch_keys = self.empty_batch()
        for _ in range(num_sequences):
            if self.key_index >= self.num_samples():
                logger.info("Finished pass through data, repermuting!")
                self.refresh_keys()

            start_key = self.keys[self.key_order[self.key_index]]
            sequence = self.walk_sequence(start_key, self.step_size)
            for step, key in enumerate(sequence):
                batch_keys[step].append(key)
            self.key_index += 1
        return batch_keys

    def num_samples(self) -> int:
        return len(self.keys)
