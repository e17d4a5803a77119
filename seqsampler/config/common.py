from dataclasses import dataclass
from typing import Type, TypeVar

from omegaconf import DictConfig

from ..data_source import DataSourceCfg
from .tools import get_typed_config


@dataclass
class CommonCfg:
    data_source: DataSourceCfg


T = TypeVar("T")


def get_typed_root_config(cfg_dict: DictConfig, cfg_type: Type[T]) -> T:
    return get_typed_config(cfg_type, cfg_dict)
