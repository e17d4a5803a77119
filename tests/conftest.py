import pytest
import torch

from seqsampler.data_source import DataSourceMemory


@pytest.fixture
def generator() -> torch.Generator:
    generator = torch.Generator()
    generator.manual_seed(0)
    return generator


@pytest.fixture
def make_data_source():
    def make(
        video_lengths: dict[str, int],
        key_labels: dict[str, list[int]] | None = None,
        num_labels: int = 2,
    ) -> DataSourceMemory:
        return DataSourceMemory(video_lengths, key_labels or {}, num_labels)

    return make
