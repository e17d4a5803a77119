from .data_source import END_OF_SEQUENCE, DataSource, KeyLabels, VideoKeys
from .data_source_json import DataSourceJson, DataSourceJsonCfg
from .data_source_memory import DataSourceMemory

DATA_SOURCES = {
    "json": DataSourceJson,
}

DataSourceCfg = DataSourceJsonCfg


def get_data_source(cfg: DataSourceCfg) -> DataSource:
    return DATA_SOURCES[cfg.name](cfg)
