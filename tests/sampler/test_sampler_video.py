import logging

import pytest

from seqsampler.sampler import SamplerConfigError
from seqsampler.sampler.sampler_video import SamplerVideo, SamplerVideoCfg


def test_walks_video_in_order(make_data_source, caplog) -> None:
    cfg = SamplerVideoCfg("video", video="b", sequence_length=2)
    sampler = SamplerVideo(cfg, make_data_source({"a": 3, "b": 4}))
    assert sampler.num_samples() == 3
    assert sampler.sample_keys(2) == [["b-1", "b-2"], ["b-2", "b-3"]]

    with caplog.at_level(logging.INFO):
        assert sampler.sample_keys(2) == [["b-3", "b-1"], ["b-4", "b-2"]]
    assert "Finished pass through b!" in caplog.text


def test_boundary_frames(make_data_source) -> None:
    cfg = SamplerVideoCfg(
        "video", video="a", sequence_length=2, use_boundary_frames=True
    )
    sampler = SamplerVideo(cfg, make_data_source({"a": 2}))
    assert sampler.sample_keys(2) == [["a-1", "a-2"], ["a-2", "a-2"]]


def test_unknown_video(make_data_source) -> None:
    with pytest.raises(SamplerConfigError):
        SamplerVideo(SamplerVideoCfg("video", video="z"), make_data_source({"a": 2}))
