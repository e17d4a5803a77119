import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ..misc.frame_key import make_frame_key
from .data_source_memory import DataSourceMemory

logger = logging.getLogger(__name__)


@dataclass
class DataSourceJsonCfg:
    name: Literal["json"]
    path: Path
    num_labels: int | None = None


class DataSourceJson(DataSourceMemory):
    """Reads an annotation index of the following form:

    {
        "num_labels": 65,
        "videos": {
            "video_validation_0000051": {
                "num_frames": 1200,
                "annotations": [[label, start_frame, end_frame], ...]
            },
            ...
        }
    }

    Annotation intervals are 1-based and inclusive. Frames that no interval covers are
    background frames.
    """

    cfg: DataSourceJsonCfg

    def __init__(self, cfg: DataSourceJsonCfg) -> None:
        self.cfg = cfg
        with cfg.path.open("r") as f:
            index = json.load(f)

        num_labels = cfg.num_labels or index.get("num_labels")
        if num_labels is None:
            raise ValueError(f"{cfg.path} does not specify num_labels.")

        videos = index["videos"]
        video_lengths = {}
        key_labels = {}
        for video in sorted(videos):
            num_frames = videos[video]["num_frames"]
            video_lengths[video] = num_frames
            for label, start, end in videos[video].get("annotations", []):
                if not 1 <= label <= num_labels:
                    raise ValueError(
                        f"Video {video} has label {label}, which is outside of "
                        f"[1, {num_labels}]."
                    )

                # Annotations sometimes extend past the extracted frames.
                for frame in range(max(start, 1), min(end, num_frames) + 1):
                    labels = key_labels.setdefault(make_frame_key(video, frame), [])
                    if label not in labels:
                        labels.append(label)

        super().__init__(video_lengths, key_labels, num_labels)
        logger.info(
            f"Loaded {len(video_lengths)} videos ({self.num_samples()} frames) from "
            f"{cfg.path}."
        )
