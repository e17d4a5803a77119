from dataclasses import dataclass
from pathlib import Path

from .common import CommonCfg


@dataclass
class EvaluateCfg(CommonCfg):
    # A torch.save'd dict with "keys" (the last frame of each evaluated sequence) and
    # "predictions" (a sample x label tensor of scores).
    predictions: Path

    # Text file with groups of video names separated by blank lines.
    val_groups: Path | None
