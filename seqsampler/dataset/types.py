from dataclasses import dataclass
from typing import Literal

from jaxtyping import Bool
from torch import Tensor

from ..sampler import BatchKeys

Stage = Literal["train", "test", "val"]


@dataclass
class Batch:
    # Outer list: steps. Inner list: sequences. Entries may be END_OF_SEQUENCE.
    keys: BatchKeys
    labels: Bool[Tensor, "step batch label"]
