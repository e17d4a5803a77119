from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

import torch

from ..data_source import DataSource, VideoKeys
from ..misc.frame_key import FrameKey

# Outer list: steps in the sequence. Inner list: one entry per sequence in the batch.
BatchKeys = list[list[FrameKey]]


class SamplerConfigError(ValueError):
    """The sampler's options are missing, contradictory or don't fit the data."""


class BatchSizeMismatchError(SamplerConfigError):
    pass


class MissingFrameError(RuntimeError):
    """A frame that boundary filtering guaranteed to exist was not found. This means
    that the data and the sampler configuration disagree, so training must not go on.
    """


@dataclass(kw_only=True)
class SamplerCfgCommon:
    sequence_length: int = 1

    # If step_size is 2, a sequence of length 5 starting at x_1 is
    # (x_1, x_3, x_5, x_7, x_9). Negative steps walk backwards.
    step_size: int = 1

    # If false, avoid sequences that go outside of the video temporally. Otherwise,
    # replicate the first or last frame of the video for sequences at the boundary.
    use_boundary_frames: bool = False


T = TypeVar("T", bound=SamplerCfgCommon)


class Sampler(ABC, Generic[T]):
    """A sampler decides which frame keys make up each batch of sequences. Samplers
    are stateful: every call to sample_keys advances them.
    """

    cfg: T
    data_source: DataSource
    video_keys: VideoKeys
    generator: torch.Generator | None

    def __init__(
        self,
        cfg: T,
        data_source: DataSource,
        generator: torch.Generator | None = None,
    ) -> None:
        if cfg.sequence_length < 1:
            raise SamplerConfigError(
                f"sequence_length must be at least 1, but got {cfg.sequence_length}."
            )
        self.cfg = cfg
        self.data_source = data_source
        self.video_keys = data_source.video_keys()
        self.generator = generator

    @abstractmethod
    def sample_keys(self, num_sequences: int) -> BatchKeys:
        """Return a list of sequence_length steps, each of which holds num_sequences
        keys (or END_OF_SEQUENCE).
        """
        pass

    @abstractmethod
    def num_samples(self) -> int:
        pass

    def num_labels(self) -> int:
        return self.data_source.num_labels()

    @property
    def sequence_length(self) -> int:
        return self.cfg.sequence_length

    @property
    def step_size(self) -> int:
        return self.cfg.step_size

    def empty_batch(self) -> BatchKeys:
        return [[] for _ in range(self.sequence_length)]

    def permute(self, items: list) -> list:
        permutation = torch.randperm(len(items), generator=self.generator)
        return [items[index] for index in permutation.tolist()]

    def lookup(self, video: str, index: int) -> FrameKey | None:
        """Return the key at the 0-based index within the video, or None if the video
        has no such frame.
        """
        keys = self.video_keys[video]
        return keys[index] if 0 <= index < len(keys) else None

    def walk_sequence(
        self,
        start_key: FrameKey,
        step_size: int,
    ) -> list[FrameKey]:
        """Walk sequence_length steps of step_size from start_key. Steps that leave the
        video repeat the last frame that existed if boundary frames are enabled.
        """
        video, frame_number = self.data_source.frame_video_offset(start_key)
        index = frame_number - 1
        sequence = []
        last_valid_key = None
        for _ in range(self.sequence_length):
            key = self.lookup(video, index)
            if key is not None:
                last_valid_key = key
            elif not self.cfg.use_boundary_frames:
                raise MissingFrameError(
                    f"Sequence starting at {start_key} needs frame "
                    f"{index + 1} of {video}, which has "
                    f"{len(self.video_keys[video])} frames."
                )
            sequence.append(last_valid_key)
            index += step_size
        return sequence


def filter_boundary_frames(
    video_keys: VideoKeys,
    sequence_length: int,
    step_size: int,
) -> list[FrameKey]:
    """Return the keys that can start a full sequence. For a positive step, this drops
    the last (sequence_length - 1) * step_size keys of each video. For a negative step,
    it drops the first (sequence_length - 1) * |step_size| keys instead.
    """
    span = (sequence_length - 1) * abs(step_size)
    keys = []
    for keys_in_video in video_keys.values():
        if step_size >= 0:
            keys.extend(keys_in_video[: max(len(keys_in_video) - span, 0)])
        else:
            keys.extend(keys_in_video[span:])
    return keys


def flatten_video_keys(video_keys: VideoKeys) -> list[FrameKey]:
    return [key for keys in video_keys.values() for key in keys]

