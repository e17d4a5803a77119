from pathlib import Path
from typing import Type, TypeVar

from dacite import Config, from_dict
from omegaconf import DictConfig, OmegaConf

T = TypeVar("T")


def get_typed_config(data_class: Type[T], cfg: DictConfig) -> T:
    """Convert an OmegaConf config into the given dataclass. Interpolations (e.g. the
    sequential sampler's batch size) are resolved first. Unions of configs are
    resolved by their name literals, and YAML integers are accepted for float fields.
    """
    return from_dict(
        data_class,
        OmegaConf.to_container(cfg, resolve=True),
        config=Config(type_hooks={Path: Path}, cast=[float]),
    )
