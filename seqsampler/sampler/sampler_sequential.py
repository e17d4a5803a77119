import logging
from dataclasses import dataclass
from typing import Literal

import torch

from ..data_source import END_OF_SEQUENCE, DataSource
from ..misc.frame_key import FrameKey
from .sampler import (
    BatchKeys,
    BatchSizeMismatchError,
    Sampler,
    SamplerCfgCommon,
    SamplerConfigError,
)

logger = logging.getLogger(__name__)


@dataclass
class SamplerSequentialCfg(SamplerCfgCommon):
    name: Literal["sequential"]

    # Must be specified up front and cannot change between calls.
    batch_size: int | None = None

    # If true, only do one pass through the videos. Useful for evaluation.
    sample_once: bool = False


class SamplerSequential(Sampler[SamplerSequentialCfg]):
    """Emit consecutive sequences of frames from batch_size videos at once.

    Each position in the batch is a lane that walks forward through one video. When a
    lane's video ends, the lane emits END_OF_SEQUENCE for the remaining steps and then
    moves on to the next video. Boundary frames are never replicated.
    """

    video_start_keys: list[FrameKey]
    next_frames: list[FrameKey | None]
    video_index: int
    sampled_all_videos: bool

    def __init__(
        self,
        cfg: SamplerSequentialCfg,
        data_source: DataSource,
        generator: torch.Generator | None = None,
    ) -> None:
        super().__init__(cfg, data_source, generator)
        if cfg.batch_size is None:
            raise SamplerConfigError("The sequential sampler requires a batch_size.")
        if cfg.batch_size < 1:
            raise SamplerConfigError("batch_size must be at least 1.")

        self.sampled_all_videos = False
        self.video_start_keys = self.permute(
            [keys[0] for keys in self.video_keys.values() if keys]
        )
        if not self.video_start_keys:
            raise SamplerConfigError("The data source contains no frames.")

        # If there are fewer videos than lanes, the extra lanes start out empty.
        self.next_frames = self.video_start_keys[: cfg.batch_size]
        self.next_frames += [None] * (cfg.batch_size - len(self.next_frames))

        # The last video that is currently being output. When a video ends, this is
        # advanced by 1 and the next video is output.
        self.video_index = cfg.batch_size - 1

    @property
    def batch_size(self) -> int:
        return self.cfg.batch_size

    def advance_video_index(self) -> None:
        self.video_index += 1
        if self.video_index >= len(self.video_start_keys):
            self.sampled_all_videos = True
            if not self.cfg.sample_once:
                logger.info("Finished pass through videos, repermuting!")
                self.video_start_keys = self.permute(self.video_start_keys)
                self.video_index = 0

    def update_start_frame(self, lane: int) -> None:
        if self.cfg.sample_once and self.sampled_all_videos:
            # Don't sample any more frames.
            self.next_frames[lane] = None
        else:
            self.next_frames[lane] = self.video_start_keys[self.video_index]

    def sample_keys(self, num_sequences: int) -> BatchKeys:
        if num_sequences != self.batch_size:
            raise BatchSizeMismatchError(
                f"Expected batch size {self.batch_size}, received {num_sequences}."
            )

        batch_keys = self.empty_batch()
        for lane in range(num_sequences):
            key = self.next_frames[lane]
            sequence_valid = True
            for step in range(self.sequence_length):
                if key is None:
                    sequence_valid = False
                else:
                    video, frame_number = self.data_source.frame_video_offset(key)
                    sequence_valid = sequence_valid and (
                        self.lookup(video, frame_number - 1) is not None
                    )
                batch_keys[step].append(key if sequence_valid else END_OF_SEQUENCE)
                if key is not None:
                    key = self.lookup(video, frame_number - 1 + self.step_size)

            if sequence_valid:
                # The lane filled its steps with real keys, so continue from the key
                # after them. That key is None if the video just ended, in which case
                # the next batch reports the end of the sequence.
                self.next_frames[lane] = key
            else:
                if not (self.cfg.sample_once and self.sampled_all_videos):
                    self.advance_video_index()
                self.update_start_frame(lane)
        return batch_keys

    def num_samples(self) -> int:
        return self.data_source.num_samples()
