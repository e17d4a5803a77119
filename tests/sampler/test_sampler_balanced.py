import logging
from collections import Counter

import pytest

from seqsampler.sampler import SamplerConfigError
from seqsampler.sampler.sampler_balanced import SamplerBalanced, SamplerBalancedCfg


def sequences(batch_keys: list[list[str]]) -> list[tuple[str, ...]]:
    return list(zip(*batch_keys))


@pytest.fixture
def imbalanced_data_source(make_data_source):
    # Label 1 is on 5 frames, label 2 on 500 frames, and the rest are background.
    key_labels = {f"rare-{frame}": [1] for frame in range(1, 6)}
    key_labels.update({f"common-{frame}": [2] for frame in range(1, 501)})
    return make_data_source({"rare": 20, "common": 600}, key_labels, num_labels=2)


def last_frame_labels(sampler: SamplerBalanced, num_sequences: int) -> Counter:
    key_label_map = sampler.data_source.key_label_map()
    batch_keys = sampler.sample_keys(num_sequences)
    return Counter(
        tuple(key_label_map[key]) or ("background",) for key in batch_keys[-1]
    )


def test_rare_and_common_labels_are_balanced(imbalanced_data_source, generator) -> None:
    sampler = SamplerBalanced(
        SamplerBalancedCfg("balanced"), imbalanced_data_source, generator
    )
    counts = last_frame_labels(sampler, 20000)
    assert set(counts) == {(1,), (2,)}
    assert counts[(1,)] / 20000 == pytest.approx(0.5, abs=0.02)


def test_background_weight(imbalanced_data_source, generator) -> None:
    cfg = SamplerBalancedCfg("balanced", background_weight=1)
    sampler = SamplerBalanced(cfg, imbalanced_data_source, generator)
    counts = last_frame_labels(sampler, 30000)
    for label in [(1,), (2,), ("background",)]:
        assert counts[label] / 30000 == pytest.approx(1 / 3, abs=0.02)


def test_include_bg_is_rejected(imbalanced_data_source) -> None:
    for include_bg in [True, False]:
        cfg = SamplerBalancedCfg("balanced", background_weight=1, include_bg=include_bg)
        with pytest.raises(SamplerConfigError, match="deprecated"):
            SamplerBalanced(cfg, imbalanced_data_source)


def test_sequences_end_on_sampled_frame(make_data_source, generator) -> None:
    # The first two frames can't end a sequence of length 3.
    key_labels = {"a-2": [1], "a-5": [1], "a-6": [2]}
    data_source = make_data_source({"a": 6}, key_labels)
    cfg = SamplerBalancedCfg("balanced", sequence_length=3)
    sampler = SamplerBalanced(cfg, data_source, generator)

    assert sampler.num_samples() == 4
    for sequence in sequences(sampler.sample_keys(100)):
        assert sequence in {("a-3", "a-4", "a-5"), ("a-4", "a-5", "a-6")}


def test_backward_step_size(make_data_source, generator) -> None:
    data_source = make_data_source({"a": 9}, {"a-9": [1]}, num_labels=1)
    cfg = SamplerBalancedCfg("balanced", sequence_length=3, step_size=4)
    sampler = SamplerBalanced(cfg, data_source, generator)
    assert sequences(sampler.sample_keys(1)) == [("a-1", "a-5", "a-9")]


def test_boundary_frames_repeat_first_frame(make_data_source, generator) -> None:
    data_source = make_data_source({"a": 4}, {"a-1": [1]}, num_labels=1)
    cfg = SamplerBalancedCfg("balanced", sequence_length=3, use_boundary_frames=True)
    sampler = SamplerBalanced(cfg, data_source, generator)
    assert sequences(sampler.sample_keys(2)) == [("a-1", "a-1", "a-1")] * 2


def test_labels_cycle_independently(make_data_source, generator) -> None:
    key_labels = {"a-1": [1], "a-2": [1], "a-3": [1], "b-1": [2], "b-2": [2]}
    data_source = make_data_source({"a": 3, "b": 2}, key_labels, num_labels=2)
    sampler = SamplerBalanced(SamplerBalancedCfg("balanced"), data_source, generator)
    sampled = sampler.sample_keys(300)[0]

    # Each label walks through its own keys, repermuting once they run out.
    for prefix, num_keys in [("a", 3), ("b", 2)]:
        label_keys = [key for key in sampled if key.startswith(prefix)]
        expected = sorted(f"{prefix}-{frame}" for frame in range(1, num_keys + 1))
        full_cycles = len(label_keys) // num_keys
        assert full_cycles > 10
        for cycle in range(full_cycles):
            chunk = label_keys[cycle * num_keys : (cycle + 1) * num_keys]
            assert sorted(chunk) == expected


def test_label_without_frames_is_skipped(make_data_source, generator, caplog) -> None:
    data_source = make_data_source({"a": 10}, {"a-3": [1]}, num_labels=3)
    with caplog.at_level(logging.WARNING):
        sampler = SamplerBalanced(
            SamplerBalancedCfg("balanced"), data_source, generator
        )
    assert "Label 2 has no frames" in caplog.text
    assert sampler.sample_keys(50)[0] == ["a-3"] * 50


def test_nothing_to_sample(make_data_source) -> None:
    data_source = make_data_source({"a": 10}, {}, num_labels=2)
    with pytest.raises(SamplerConfigError):
        SamplerBalanced(SamplerBalancedCfg("balanced"), data_source)


def test_zero_sequences(make_data_source, generator) -> None:
    data_source = make_data_source({"a": 4}, {"a-2": [1]})
    sampler = SamplerBalanced(SamplerBalancedCfg("balanced"), data_source, generator)
    assert sampler.sample_keys(0) == [[]]

    # Drawing nothing doesn't disturb the following draws.
    assert sampler.sample_keys(2)[0] == ["a-2", "a-2"]
