import logging
from dataclasses import dataclass
from typing import Literal

import torch
from jaxtyping import Float
from torch import Tensor

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
class SamplerBalancedCfg(SamplerCfgCommon):
    name: Literal["balanced"]

    # Weight for sampling background frames relative to each real label. With a weight
    # of 1, background frames are sampled as often as frames from any particular label,
    # i.e. with probability 1 / (num_labels + 1).
    background_weight: float = 0.0

    # Deprecated in favor of background_weight. Setting it at all is an error.
    include_bg: bool | None = None


class SamplerBalanced(Sampler[SamplerBalancedCfg]):
    """Sample from each label a balanced number of times, so that the model sees
    approximately as much data from rare labels as from common ones.

    A label is drawn first, then the next key carrying that label. The label of the
    _last_ frame in a sequence is used for balancing, so sequences are built backwards
    from the sampled key.

    Label slots are stored in lists of length num_labels + 1: slot i holds label i + 1,
    and the last slot holds background frames.
    """

    num_keys: int
    label_key_map: list[list[FrameKey]]
    label_indices: list[int]
    label_weights: Float[Tensor, " slot"]

    def __init__(
        self,
        cfg: SamplerBalancedCfg,
        data_source: DataSource,
        generator: torch.Generator | None = None,
    ) -> None:
        super().__init__(cfg, data_source, generator)
        if cfg.include_bg is not None:
            raise SamplerConfigError(
                "include_bg is deprecated; use background_weight instead."
            )
        if cfg.background_weight < 0:
            raise SamplerConfigError("background_weight must be non-negative.")

        # The sampled key ends its sequence, so room is reserved before it.
        if cfg.use_boundary_frames:
            valid_keys = flatten_video_keys(self.video_keys)
        else:
            valid_keys = filter_boundary_frames(
                self.video_keys, cfg.sequence_length, -cfg.step_size
            )
        self.num_keys = len(valid_keys)

        num_labels = data_source.num_labels()
        background = num_labels + 1
        key_label_map = data_source.key_label_map()
        self.label_key_map = [[] for _ in range(num_labels + 1)]
        for key in valid_keys:
            for label in key_label_map.get(key) or [background]:
                self.label_key_map[label - 1].append(key)

        self.label_weights = torch.ones(num_labels + 1)
        self.label_weights[-1] = cfg.background_weight
        for slot, keys in enumerate(self.label_key_map):
            if not keys and self.label_weights[slot] > 0:
                logger.warning(
                    f"Label {slot + 1} has no frames to sample; it will be skipped."
                )
                self.label_weights[slot] = 0
        if self.label_weights.sum() == 0:
            raise SamplerConfigError("No label has both frames and a nonzero weight.")

        # For each label, maintain the index of the next key to output.
        self.label_indices = [0] * (num_labels + 1)
        self.permute_keys()

    def permute_keys(self) -> None:
        for slot in range(len(self.label_key_map)):
            self.label_key_map[slot] = self.permute(self.label_key_map[slot])
            self.label_indices[slot] = 0

    def advance_label_index(self, slot: int) -> None:
        if self.label_indices[slot] + 1 < len(self.label_key_map[slot]):
            self.label_indices[slot] += 1
        else:
            logger.debug(f"Finished pass through label {slot + 1}, repermuting.")
            self.label_key_map[slot] = self.permute(self.label_key_map[slot])
            self.label_indices[slot] = 0

    def sample_keys(self, num_sequences: int) -> BatchKeys:
        batch_keys = self.empty_batch()
        if num_sequences == 0:
            # torch.multinomial can't draw zero samples.
            return batch_keys
        sampled_slots = torch.multinomial(
            self.label_weights,
            num_sequences,
            replacement=True,
            generator=self.generator,
        )
        for slot in sampled_slots.tolist():
            end_key = self.label_key_map[slot][self.label_indices[slot]]
            sequence = self.walk_sequence(end_key, -self.step_size)
            for step, key in enumerate(reversed(sequence)):
                batch_keys[step].append(key)
            self.advance_label_index(slot)
        return batch_keys

    def num_samples(self) -> int:
        return self.num_keys
