from .data_module import DataLoaderStageCfg, DataModuleSampled, DataModuleSampledCfg
from .dataset_sampled import DatasetSampled, get_labels
from .types import Batch, Stage
