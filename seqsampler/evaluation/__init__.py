from .mean_average_precision import (
    compute_average_precisions,
    compute_group_mean_average_precisions,
    compute_mean_average_precision,
    load_video_groups,
)
