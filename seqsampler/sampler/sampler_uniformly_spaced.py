import logging
from dataclasses import dataclass
from typing import Literal

import torch
from jaxtyping import Int64
from torch import Tensor

from ..data_source import DataSource
from ..misc.frame_key import FrameKey
from .sampler import BatchKeys, Sampler, SamplerCfgCommon, SamplerConfigError

logger = logging.getLogger(__name__)


@dataclass
class SamplerUniformlySpacedCfg(SamplerCfgCommon):
    name: Literal["uniformly_spaced"]
    num_frames_per_video: int | None = None


def get_uniformly_spaced_frames(
    num_frames: int,
    num_frames_per_video: int,
    sequence_length: int,
) -> Int64[Tensor, " sample"]:
    """Return 1-based frame numbers spaced uniformly between the first and last frame,
    clamped so that at least sequence_length frames end at each of them.
    """
    frames = torch.linspace(1, num_frames, num_frames_per_video, dtype=torch.float64)
    return frames.floor().long().clamp(min=sequence_length)


class SamplerUniformlySpaced(Sampler[SamplerUniformlySpacedCfg]):
    """Sample uniformly spaced frames from every video, e.g. for evaluating on
    Charades-style benchmarks.

    For each video, num_frames_per_video uniformly spaced frames are chosen, and each
    one ends a sequence. Frames without sequence_length - 1 preceding frames instead get
    a sequence that starts on the first frame. Every sequence is computed up front. The
    step size is always 1 and boundary frames are only used for videos shorter than
    sequence_length, which repeat their last frame.
    """

    sampled_sequences: list[list[FrameKey]]
    key_index: int

    def __init__(
        self,
        cfg: SamplerUniformlySpacedCfg,
        data_source: DataSource,
        generator: torch.Generator | None = None,
    ) -> None:
        super().__init__(cfg, data_source, generator)
        if cfg.num_frames_per_video is None:
            raise SamplerConfigError(
                "The uniformly spaced sampler requires num_frames_per_video."
            )
        if cfg.num_frames_per_video < 1:
            raise SamplerConfigError("num_frames_per_video must be at least 1.")
        if cfg.step_size != 1:
            logger.warning(
                f"Ignoring step size {cfg.step_size}; uniformly spaced sampling "
                "always uses a step size of 1."
            )

        self.sampled_sequences = []
        for keys in self.video_keys.values():
            if not keys:
                continue
            end_frames = get_uniformly_spaced_frames(
                len(keys), cfg.num_frames_per_video, cfg.sequence_length
            )
            for end_frame in end_frames.tolist():
                first_index = end_frame - cfg.sequence_length
                self.sampled_sequences.append(
                    [
                        keys[min(first_index + step, len(keys) - 1)]
                        for step in range(cfg.sequence_length)
                    ]
                )
        if not self.sampled_sequences:
            raise SamplerConfigError("The data source contains no frames.")
        self.key_index = 0

    def sample_keys(self, num_sequences: int) -> BatchKeys:
        batch_keys = self.empty_batch()
        for _ in range(num_sequences):
            if self.key_index >= len(self.sampled_sequences):
                logger.info("Finished pass through data!")
                self.key_index = 0

            # Transpose from (sequence, step) to (step, sequence).
            for step, key in enumerate(self.sampled_sequences[self.key_index]):
                batch_keys[step].append(key)
            self.key_index += 1
        return batch_keys

    def num_samples(self) -> int:
        return len(self.sampled_sequences)
