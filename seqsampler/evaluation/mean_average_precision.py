import logging
from pathlib import Path

import torch
from jaxtyping import Bool, Float
from torch import Tensor

from ..misc.frame_key import FrameKey, parse_frame_key

logger = logging.getLogger(__name__)


def compute_average_precisions(
    predictions: Float[Tensor, "sample label"],
    groundtruth: Bool[Tensor, "sample label"],
) -> Float[Tensor, " label"]:
    """Compute the average precision of each label, i.e.

    sum_k (P(k) * is_positive(k)) / (number of positives)

    where P(k) is the precision at cut-off k in the ranking by descending score. Labels
    without any positive samples get an average precision of -1.
    """
    num_samples, _ = predictions.shape
    order = predictions.argsort(dim=0, descending=True, stable=True)
    hits = groundtruth.bool().gather(0, order).float()

    ranks = torch.arange(1, num_samples + 1, device=predictions.device)
    precisions = hits.cumsum(dim=0) / ranks[:, None]
    num_positives = hits.sum(dim=0)
    average_precisions = (precisions * hits).sum(dim=0) / num_positives.clamp(min=1)
    return torch.where(num_positives > 0, average_precisions, -1)


def compute_mean_average_precision(
    predictions: Float[Tensor, "sample label"],
    groundtruth: Bool[Tensor, "sample label"],
) -> float:
    """Average the per-label average precisions of labels that have at least one
    positive sample. Returns -1 if no label does.
    """
    average_precisions = compute_average_precisions(predictions, groundtruth)
    average_precisions = average_precisions[average_precisions >= 0]
    if average_precisions.numel() == 0:
        logger.warning("No positive labels! Returning -1.")
        return -1.0
    return average_precisions.mean().item()


def load_video_groups(path: Path) -> list[list[str]]:
    """Load groups of video names. Each line holds one video name, and groups are
    separated by blank lines.
    """
    groups = [[]]
    with path.open("r") as f:
        for line in f:
            line = line.strip()
            if line:
                groups[-1].append(line)
            elif groups[-1]:
                groups.append([])
    return [group for group in groups if group]


def compute_group_mean_average_precisions(
    keys: list[FrameKey],
    predictions: Float[Tensor, "sample label"],
    groundtruth: Bool[Tensor, "sample label"],
    groups: list[list[str]],
) -> Float[Tensor, " group"]:
    """Compute the mean average precision of each group of videos. A video listed in
    several groups belongs to the first one. Groups without any samples get -1.
    """
    video_groups = {}
    for group_index, group in reversed(list(enumerate(groups))):
        for video in group:
            video_groups[video] = group_index

    group_indices = torch.tensor(
        [video_groups.get(parse_frame_key(key)[0], -1) for key in keys],
        dtype=torch.int64,
    )

    mean_average_precisions = torch.full((len(groups),), -1, dtype=torch.float64)
    for group_index in range(len(groups)):
        mask = group_indices == group_index
        if mask.any():
            mean_average_precisions[group_index] = compute_mean_average_precision(
                predictions[mask], groundtruth[mask]
            )
    return mean_average_precisions
