from abc import ABC, abstractmethod

from ..misc.frame_key import FrameKey, parse_frame_key

VideoKeys = dict[str, list[FrameKey]]
KeyLabels = dict[FrameKey, list[int]]

# Emitted in place of a key once a sequence has run past the end of its video. It has
# no trailing frame number, so it can never be mistaken for a real key.
END_OF_SEQUENCE = "<END_OF_SEQUENCE>"


class DataSource(ABC):
    """A data source knows which frames exist in each video and which labels each frame
    carries. Samplers only ever read from it.

    Label ids run from 1 to num_labels(). Frames without a positive label belong to the
    background label, num_labels() + 1, whether or not the data source lists it.
    """

    @abstractmethod
    def video_keys(self) -> VideoKeys:
        """Map each video to its keys. Position i holds the key for frame i + 1."""
        pass

    @abstractmethod
    def key_label_map(self) -> KeyLabels:
        pass

    @abstractmethod
    def num_labels(self) -> int:
        pass

    def frame_video_offset(self, key: FrameKey) -> tuple[str, int]:
        return parse_frame_key(key)

    def num_samples(self) -> int:
        return sum(len(keys) for keys in self.video_keys().values())

    @property
    def background_label(self) -> int:
        return self.num_labels() + 1
