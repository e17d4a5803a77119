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
)

logger = logging.getLogger(__name__)


@dataclass
class SamplerVideoCfg(SamplerCfgCommon):
    name: Literal["video"]
    video: str


class SamplerVideo(Sampler[SamplerVideoCfg]):
    """Walk through every sequence start of a single video in order. This is used to
    compute per-frame outputs for one video at a time.
    """

    keys: list[FrameKey]
    key_index: int

    def __init__(
        self,
        cfg: SamplerVideoCfg,
        data_source: DataSource,
        generator: torch.Generator | None = None,
    ) -> None:
        super().__init__(cfg, data_source, generator)
        if cfg.video not in self.video_keys:
            raise SamplerConfigError(f"Unknown video {cfg.video}.")

        video_keys = {cfg.video: self.video_keys[cfg.video]}
        if cfg.use_boundary_frames:
            self.keys = list(video_keys[cfg.video])
        else:
            self.keys = filter_boundary_frames(
                video_keys, cfg.sequence_length, cfg.step_size
            )
        if not self.keys:
            raise SamplerConfigError(
                f"Video {cfg.video} is too short for a sequence of length "
                f"{cfg.sequence_length} with step size {cfg.step_size}."
            )
        self.key_index = 0

    def sample_keys(self, num_sequences: int) -> BatchKeys:
        batch_keys = self.empty_batch()
        for _ in range(num_sequences):
            if self.key_index >= self.num_samples():
                logger.info(f"Finished pass through {self.cfg.video}!")
                self.key_index = 0

            sequence = self.walk_sequence(self.keys[self.key_index], self.step_size)
            for step, key in enumerate(sequence):
                batch_keys[step].append(key)
            self.key_index += 1
        return batch_keys

    def num_samples(self) -> int:
        return len(self.keys)
