FrameKey = str


def make_frame_key(video: str, frame_number: int) -> FrameKey:
    return f"{video}-{frame_number}"


def parse_frame_key(key: FrameKey) -> tuple[str, int]:
    """Split a key of the form <video>-<frame_number> into its video and its 1-based
    frame number. Video names may contain dashes, so the split happens at the last one.
    """

    video, separator, frame = key.rpartition("-")
    if not separator or not video or not frame.isdigit():
        raise ValueError(f'Malformed frame key "{key}".')

    frame_number = int(frame)
    if frame_number < 1:
        raise ValueError(f'Frame numbers start at 1, but got "{key}".')
    return video, frame_number


def make_video_keys(video: str, num_frames: int) -> list[FrameKey]:
    return [make_frame_key(video, frame) for frame in range(1, num_frames + 1)]
