"""
End-to-end sync passes over real images.
"""

import os
import time
from pathlib import Path

import pytest
from PIL import Image

from imgsync.core.config import ImgSyncConfig
from imgsync.sync.models import ItemAction
from imgsync.sync.reconciler import Reconciler
from imgsync.transform.images import ImageTransformer

pytestmark = pytest.mark.integration

PAST = time.time() - 3_600


@pytest.fixture
def reconciler(sample_config: ImgSyncConfig) -> Reconciler:
    reconciler = Reconciler(sample_config.sync, ImageTransformer(sample_config.encoding))
    reconciler.ensure_artifact_root()
    return reconciler


def test_mirror_lifecycle(
    reconciler: Reconciler, source_root: Path, artifact_root: Path, make_image
) -> None:
    make_image(source_root / "a.png", mtime=PAST)
    make_image(source_root / "gallery" / "b.jpg", mtime=PAST)
    make_image(source_root / "gallery" / "deep" / "c.WEBP", mtime=PAST)

    first = reconciler.run_pass()
    second = reconciler.run_pass()

    assert first.summary.created == 3
    assert second.summary.total_changes == 0
    assert second.summary.current == 3
    with Image.open(artifact_root / "gallery" / "deep" / "c.WEBP") as img:
        assert img.format == "WEBP"

    # Modify one source, remove another
    artifact_ns = (artifact_root / "a.png").stat().st_mtime_ns
    make_image(source_root / "a.png", size=(40, 40))
    os.utime(source_root / "a.png", ns=(artifact_ns + 5_000_000_000,) * 2)
    (source_root / "gallery" / "b.jpg").unlink()

    third = reconciler.run_pass()

    assert third.keys_with(ItemAction.UPDATED) == ["a.png"]
    assert third.keys_with(ItemAction.DELETED) == ["gallery/b.jpg"]
    assert third.keys_with(ItemAction.CURRENT) == ["gallery/deep/c.WEBP"]
    with Image.open(artifact_root / "a.png") as img:
        assert img.size == (40, 40)
    assert not (artifact_root / "gallery" / "b.jpg").exists()


def test_create_keep_and_prune_in_one_pass(
    reconciler: Reconciler, source_root: Path, artifact_root: Path, make_image
) -> None:
    make_image(source_root / "a.png", mtime=PAST)
    make_image(source_root / "b.jpg", mtime=PAST)
    b_artifact = make_image(artifact_root / "b.jpg", color=(0, 0, 0), mtime=PAST + 60)
    b_before = b_artifact.read_bytes()
    c_artifact = make_image(artifact_root / "c.webp", mtime=PAST)

    report = reconciler.run_pass()

    assert (artifact_root / "a.png").exists()
    assert b_artifact.read_bytes() == b_before
    assert not c_artifact.exists()
    assert report.summary.created == 1
    assert report.summary.current == 1
    assert report.summary.deleted == 1
    assert report.success


def test_parallel_pass_matches_sequential(
    sample_config: ImgSyncConfig, source_root: Path, artifact_root: Path, make_image
) -> None:
    for i in range(6):
        make_image(source_root / f"set{i % 2}" / f"img{i}.png", size=(8 + i, 8))
    (source_root / "set0" / "broken.jpg").write_bytes(b"\xff\xd8 not really")
    sample_config.sync.workers = 3

    report = Reconciler(sample_config.sync, ImageTransformer(sample_config.encoding)).run_pass()

    assert report.summary.created == 6
    assert report.summary.failed == 1
    assert sorted(p.name for p in artifact_root.rglob("*.png")) == [
        f"img{i}.png" for i in range(6)
    ]
    # No staging files left behind
    assert not list(artifact_root.rglob("*.tmp"))
