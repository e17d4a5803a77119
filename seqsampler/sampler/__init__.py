import torch

from ..data_source import DataSource
from .sampler import (
    BatchKeys,
    BatchSizeMismatchError,
    MissingFrameError,
    Sampler,
    SamplerConfigError,
    filter_boundary_frames,
)
from .sampler_balanced import SamplerBalanced, SamplerBalancedCfg
from .sampler_permuted import SamplerPermuted, SamplerPermutedCfg
from .sampler_sequential import SamplerSequential, SamplerSequentialCfg
from .sampler_sequential_batch import SamplerSequentialBatch, SamplerSequentialBatchCfg
from .sampler_uniformly_spaced import SamplerUniformlySpaced, SamplerUniformlySpacedCfg
from .sampler_video import SamplerVideo, SamplerVideoCfg

SAMPLERS = {
    "balanced": SamplerBalanced,
    "permuted": SamplerPermuted,
    "sequential": SamplerSequential,
    "sequential_batch": SamplerSequentialBatch,
    "uniformly_spaced": SamplerUniformlySpaced,
    "video": SamplerVideo,
}

SamplerCfg = (
    SamplerBalancedCfg
    | SamplerPermutedCfg
    | SamplerSequentialCfg
    | SamplerSequentialBatchCfg
    | SamplerUniformlySpacedCfg
    | SamplerVideoCfg
)


def get_sampler(
    cfg: SamplerCfg,
    data_source: DataSource,
    generator: torch.Generator | None = None,
) -> Sampler:
    return SAMPLERS[cfg.name](cfg, data_source, generator)
