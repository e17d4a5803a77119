import json
import subprocess
import sys
from pathlib import Path

import torch

ROOT = Path(__file__).resolve().parents[1]


def write_index(path: Path) -> Path:
    index = {
        "num_labels": 2,
        "videos": {
            "video_a": {"num_frames": 12, "annotations": [[1, 1, 6]]},
            "video_b": {"num_frames": 8, "annotations": [[2, 3, 8]]},
        },
    }
    path.write_text(json.dumps(index))
    return path


def run_module(module: str, overrides: list[str], run_dir: Path):
    return subprocess.run(
        [sys.executable, "-m", module, *overrides, f"hydra.run.dir={run_dir}"],
        cwd=ROOT,
        capture_output=True,
        text=True,
    )


def test_sample(tmp_path: Path) -> None:
    index_path = write_index(tmp_path / "index.json")
    output_path = tmp_path / "batches.json"
    result = run_module(
        "seqsampler.sample",
        [
            f"data_source.path={index_path}",
            "data_source.num_labels=2",
            "data_module.train.batch_size=4",
            "data_module.train.num_batches=3",
            "data_module.train.sampler.sequence_length=2",
            f"output_path={output_path}",
        ],
        tmp_path / "run",
    )
    assert result.returncode == 0, result.stderr

    batches = json.loads(output_path.read_text())
    assert len(batches) == 3
    for batch_keys in batches:
        assert len(batch_keys) == 2
        assert all(len(step_keys) == 4 for step_keys in batch_keys)


def test_evaluate(tmp_path: Path) -> None:
    index_path = write_index(tmp_path / "index.json")
    keys = [f"video_a-{frame}" for frame in range(1, 13)]
    predictions = torch.zeros((12, 2))
    predictions[:6, 0] = 1
    predictions_path = tmp_path / "predictions.pt"
    torch.save({"keys": keys, "predictions": predictions}, predictions_path)

    groups_path = tmp_path / "groups.txt"
    groups_path.write_text("video_a\n\nvideo_b\n")

    result = run_module(
        "seqsampler.evaluate",
        [
            f"data_source.path={index_path}",
            "data_source.num_labels=2",
            f"predictions={predictions_path}",
            f"val_groups={groups_path}",
        ],
        tmp_path / "run",
    )
    assert result.returncode == 0, result.stderr
    output = result.stdout + result.stderr
    assert "mAP: 1.00000" in output
    assert "Group 2 mAP: -1.00000" in output
