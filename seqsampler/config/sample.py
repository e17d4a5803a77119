from dataclasses import dataclass
from pathlib import Path

from ..dataset.data_module import DataModuleSampledCfg
from ..dataset.types import Stage
from .common import CommonCfg


@dataclass
class SampleCfg(CommonCfg):
    data_module: DataModuleSampledCfg
    stage: Stage
    output_path: Path | None
