from ..misc.frame_key import make_video_keys
from .data_source import DataSource, KeyLabels, VideoKeys


class DataSourceMemory(DataSource):
    video_keys_: VideoKeys
    key_labels: KeyLabels
    num_labels_: int

    def __init__(
        self,
        video_lengths: dict[str, int],
        key_labels: KeyLabels,
        num_labels: int,
    ) -> None:
        # Labels are 1-based, and num_labels + 1 explicitly marks background.
        for key, labels in key_labels.items():
            for label in labels:
                if not 1 <= label <= num_labels + 1:
                    raise ValueError(
                        f"Key {key} has label {label}, which is outside of "
                        f"[1, {num_labels + 1}]."
                    )

        self.video_keys_ = {
            video: make_video_keys(video, num_frames)
            for video, num_frames in video_lengths.items()
        }
        # Every key gets an entry so that lookups never fail for background frames.
        self.key_labels = {
            key: list(key_labels.get(key, []))
            for keys in self.video_keys_.values()
            for key in keys
        }
        self.num_labels_ = num_labels

    def video_keys(self) -> VideoKeys:
        return self.video_keys_

    def key_label_map(self) -> KeyLabels:
        return self.key_labels

    def num_labels(self) -> int:
        return self.num_labels_
