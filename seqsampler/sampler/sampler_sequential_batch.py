import logging
from dataclasses import dataclass
from typing import Literal

import torch

from ..data_source import DataSource
from .sampler import BatchKeys, Sampler, SamplerCfgCommon, SamplerConfigError

logger = logging.getLogger(__name__)


@dataclass
class SamplerSequentialBatchCfg(SamplerCfgCommon):
    name: Literal["sequential_batch"]

    # Number of frames between the starts of consecutive sequences. For example, if
    # sequence_length is 2 and stride is 1, the first two sequences are
    # (frame 1, frame 2) and (frame 2, frame 3). Defaults to sequence_length, i.e.
    # sequences that don't overlap.
    stride: int | None = None


class SamplerSequentialBatch(Sampler[SamplerSequentialBatchCfg]):
    """Select a video, then fill batches with consecutive sequences from it. Once the
    video is exhausted, move on to the next one. The video order is repermuted after
    every pass through the videos.
    """

    videos: list[str]
    video_index: int
    frame_index: int
    stride: int

    def __init__(
        self,
        cfg: SamplerSequentialBatchCfg,
        data_source: DataSource,
        generator: torch.Generator | None = None,
    ) -> None:
        super().__init__(cfg, data_source, generator)
        if cfg.step_size < 1:
            raise SamplerConfigError(
                "The sequential batch sampler only walks forward, but got step size "
                f"{cfg.step_size}."
            )
        self.stride = cfg.sequence_length if cfg.stride is None else cfg.stride
        if self.stride < 1:
            raise SamplerConfigError(
                f"stride must be at least 1, but got {self.stride}."
            )
        if not self.video_keys:
            raise SamplerConfigError("The data source contains no videos.")
        for video, keys in self.video_keys.items():
            if not self.has_sequence(len(keys)):
                raise SamplerConfigError(
                    f"Video {video} has {len(keys)} frames, which is too few for a "
                    f"sequence of length {self.sequence_length} with step size "
                    f"{self.step_size}."
                )

        self.videos = self.permute(list(self.video_keys))
        self.video_index = 0
        self.frame_index = 0

    @property
    def video(self) -> str:
        return self.videos[self.video_index]

    def has_sequence(self, num_frames: int, frame_index: int = 0) -> bool:
        """Check whether a sequence can start at frame_index in a video with
        num_frames frames.
        """
        if self.cfg.use_boundary_frames:
            return frame_index < num_frames
        span = (self.sequence_length - 1) * self.step_size
        return frame_index < num_frames - span

    def is_valid_start(self) -> bool:
        return self.has_sequence(len(self.video_keys[self.video]), self.frame_index)

    def advance_video(self) -> None:
        logger.debug(
            f"Finished video {self.video} ({len(self.video_keys[self.video])} frames)."
        )
        self.frame_index = 0
        self.video_index += 1
        if self.video_index >= len(self.videos):
            logger.info("Finished pass through videos, repermuting!")
            self.videos = self.permute(self.videos)
            self.video_index = 0

    def sample_keys(self, num_sequences: int) -> BatchKeys:
        batch_keys = self.empty_batch()
        for _ in range(num_sequences):
            # Every video holds at least one sequence, so the next one starts at a
            # valid frame.
            if not self.is_valid_start():
                self.advance_video()

            start_key = self.video_keys[self.video][self.frame_index]
            sequence = self.walk_sequence(start_key, self.step_size)
            for step, key in enumerate(sequence):
                batch_keys[step].append(key)
            self.frame_index += self.stride
        return batch_keys

    def num_samples(self) -> int:
        return self.data_source.num_samples()
