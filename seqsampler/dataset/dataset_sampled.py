import torch
from jaxtyping import Bool
from torch import Tensor
from torch.utils.data import IterableDataset

from ..data_source import END_OF_SEQUENCE, DataSource
from ..sampler import BatchKeys, Sampler


def get_labels(
    batch_keys: BatchKeys,
    data_source: DataSource,
) -> Bool[Tensor, "step batch label"]:
    """Convert sampled keys into multi-hot labels. Background is not a label, so
    background frames and END_OF_SEQUENCE entries have no positive labels.
    """
    num_labels = data_source.num_labels()
    key_label_map = data_source.key_label_map()
    num_steps = len(batch_keys)
    batch_size = len(batch_keys[0]) if num_steps > 0 else 0
    labels = torch.zeros((num_steps, batch_size, num_labels), dtype=torch.bool)
    for step, step_keys in enumerate(batch_keys):
        for index, key in enumerate(step_keys):
            if key == END_OF_SEQUENCE:
                continue
            for label in key_label_map.get(key, []):
                if label <= num_labels:
                    labels[step, index, label - 1] = True
    return labels


class DatasetSampled(IterableDataset):
    """Yield num_batches pre-batched samples per epoch. The sampler's state persists
    across epochs, so consecutive epochs continue where the previous one stopped.
    Images are not loaded here; each batch carries its keys so that they can be.
    """

    def __init__(
        self,
        sampler: Sampler,
        data_source: DataSource,
        batch_size: int,
        num_batches: int,
    ) -> None:
        self.sampler = sampler
        self.data_source = data_source
        self.batch_size = batch_size
        self.num_batches = num_batches

    def __iter__(self):
        for _ in range(self.num_batches):
            batch_keys = self.sampler.sample_keys(self.batch_size)
            yield {
                "keys": batch_keys,
                "labels": get_labels(batch_keys, self.data_source),
            }

    def __len__(self) -> int:
        return self.num_batches
