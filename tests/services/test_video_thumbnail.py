import base64
import io
import threading
import time

import pytest
from PIL import Image

from videoinspector.common.process.media_tool import MediaToolRunner, ToolOutput
from videoinspector.domain.errors import (
    ArtifactReadFailed,
    InspectionCancelled,
    ToolExecutionFailed,
    ToolTimedOut,
)
from videoinspector.services.thumbs.video_thumbnail import VideoThumbnail


@pytest.fixture()
def scratch(tmp_path):
    d = tmp_path / "scratch"
    d.mkdir()
    return d


def _offsets(runner):
    return [c["args"][c["args"].index("-ss") + 1] for c in runner.tool_calls("ffmpeg")]


# ---- planning ----------------------------------------------------------------

def test_plan_default_fractions(fake_runner_cls, scratch):
    vt = VideoThumbnail(fake_runner_cls(), scratch)
    specs = vt.plan(10.0)
    assert [s.index for s in specs] == [0, 1, 2, 3]
    assert [s.offset_sec for s in specs] == pytest.approx([1.0, 3.0, 6.0, 9.0])
    assert all((s.target_width, s.target_height) == (480, 270) for s in specs)


def test_plan_zero_duration_collapses_to_start(fake_runner_cls, scratch):
    specs = VideoThumbnail(fake_runner_cls(), scratch).plan(0.0)
    assert len(specs) == 4
    assert all(s.offset_sec == 0.0 for s in specs)


def test_plan_custom_fractions_and_box(fake_runner_cls, scratch):
    vt = VideoThumbnail(fake_runner_cls(), scratch, fractions=(0.0, 0.5, 1.0), target_width=320, target_height=180)
    specs = vt.plan(8.0)
    assert [s.offset_sec for s in specs] == [0.0, 4.0, 8.0]
    assert specs[0].target_width == 320


# ---- generation --------------------------------------------------------------

def test_generates_four_pngs_in_ascending_order(fake_runner_cls, png_bytes, scratch, tmp_path):
    runner = fake_runner_cls(image=png_bytes)
    vt = VideoThumbnail(runner, scratch, timeout_sec=12)

    images = vt.generate_thumbnails(tmp_path / "clip.mp4", 10.0)

    assert len(images) == 4
    assert all(img.mime_type == "image/png" for img in images)
    assert all(img.data == png_bytes for img in images)
    assert images[0].data_uri == "data:image/png;base64," + base64.b64encode(png_bytes).decode()
    assert _offsets(runner) == ["1.000", "3.000", "6.000", "9.000"]
    assert all(c["timeout"] == 12 for c in runner.calls)


def test_ffmpeg_arguments(fake_runner_cls, png_bytes, scratch, tmp_path):
    runner = fake_runner_cls(image=png_bytes)
    video = tmp_path / "clip.mp4"
    VideoThumbnail(runner, scratch).generate_thumbnails(video, 10.0)

    args = runner.calls[0]["args"]
    assert args[args.index("-i") + 1] == str(video)
    assert args[args.index("-frames:v") + 1] == "1"
    assert args[args.index("-vf") + 1] == "scale=480:270:force_original_aspect_ratio=decrease"
    assert args[args.index("-f") + 1] == "image2"
    assert args[-2] == "-y"
    assert args[-1].startswith(str(scratch))
    assert args[-1].endswith(".png")
    # seek happens before the input for fast keyframe seeking
    assert args.index("-ss") < args.index("-i")


def test_artifacts_unique_per_offset_and_removed(fake_runner_cls, png_bytes, scratch, tmp_path):
    runner = fake_runner_cls(image=png_bytes)
    VideoThumbnail(runner, scratch).generate_thumbnails(tmp_path / "clip.mp4", 10.0)

    assert len(set(runner.written)) == 4
    assert not any(p.exists() for p in runner.written)
    assert list(scratch.iterdir()) == []


def test_zero_duration_still_requests_every_thumbnail(fake_runner_cls, png_bytes, scratch, tmp_path):
    runner = fake_runner_cls(image=png_bytes)
    images = VideoThumbnail(runner, scratch).generate_thumbnails(tmp_path / "still.mp4", 0.0)
    assert len(images) == 4
    assert _offsets(runner) == ["0.000"] * 4


def test_failure_on_third_thumbnail_fails_whole_batch(fake_runner_cls, png_bytes, scratch, tmp_path):
    runner = fake_runner_cls(image=png_bytes)
    runner.script[2] = ToolOutput(tool="ffmpeg", returncode=1, stdout="", stderr="Conversion failed!")

    with pytest.raises(ToolExecutionFailed) as ei:
        VideoThumbnail(runner, scratch).generate_thumbnails(tmp_path / "clip.mp4", 10.0)

    assert ei.value.offset_sec == pytest.approx(6.0)
    assert "Conversion failed!" in ei.value.stderr_excerpt
    assert len(runner.calls) == 3  # the 4th is never attempted
    assert list(scratch.iterdir()) == []


def test_partial_output_removed_when_tool_fails(fake_runner_cls, png_bytes, scratch, tmp_path):
    runner = fake_runner_cls(image=png_bytes)
    leftovers = []

    def _half_written(tool, args):
        out = args[-1]
        with open(out, "wb") as fh:
            fh.write(png_bytes[:10])
        leftovers.append(out)
        return ToolOutput(tool=tool, returncode=1, stdout="", stderr="killed")

    runner.script[0] = _half_written
    with pytest.raises(ToolExecutionFailed):
        VideoThumbnail(runner, scratch).generate_thumbnails(tmp_path / "clip.mp4", 10.0)
    assert leftovers
    assert list(scratch.iterdir()) == []


def test_success_without_output_file_is_artifact_read_failure(fake_runner_cls, png_bytes, scratch, tmp_path):
    runner = fake_runner_cls(image=png_bytes)
    runner.script[1] = ToolOutput(tool="ffmpeg", returncode=0, stdout="", stderr="")

    with pytest.raises(ArtifactReadFailed):
        VideoThumbnail(runner, scratch).generate_thumbnails(tmp_path / "clip.mp4", 10.0)
    assert list(scratch.iterdir()) == []


@pytest.mark.parametrize("payload", [b"", b"definitely not an image"])
def test_unreadable_output_is_artifact_read_failure(fake_runner_cls, scratch, tmp_path, payload):
    runner = fake_runner_cls(image=payload)
    with pytest.raises(ArtifactReadFailed):
        VideoThumbnail(runner, scratch).generate_thumbnails(tmp_path / "clip.mp4", 10.0)
    assert list(scratch.iterdir()) == []


def test_cancelled_before_start_runs_nothing(fake_runner_cls, png_bytes, scratch, tmp_path):
    runner = fake_runner_cls(image=png_bytes)
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(InspectionCancelled):
        VideoThumbnail(runner, scratch).generate_thumbnails(tmp_path / "clip.mp4", 10.0, cancel=cancel)
    assert runner.calls == []


def test_jpeg_output(fake_runner_cls, scratch, tmp_path):
    buf = io.BytesIO()
    Image.new("RGB", (32, 18), (0, 128, 0)).save(buf, format="JPEG")
    runner = fake_runner_cls(image=buf.getvalue())

    images = VideoThumbnail(runner, scratch, format="jpeg").generate_thumbnails(tmp_path / "clip.mp4", 4.0)

    assert {img.mime_type for img in images} == {"image/jpeg"}
    args = runner.calls[0]["args"]
    assert args[-1].endswith(".jpg")
    assert args[args.index("-q:v") + 1] == "2"


def test_unsupported_format(fake_runner_cls, scratch):
    with pytest.raises(ValueError):
        VideoThumbnail(fake_runner_cls(), scratch, format="gif")


def test_with_script_tool(make_tool, png_bytes, scratch, tmp_path):
    frame = tmp_path / "frame.png"
    frame.write_bytes(png_bytes)
    tool = make_tool("ffmpeg", f"pathlib.Path(sys.argv[-1]).write_bytes(pathlib.Path({str(frame)!r}).read_bytes())")
    vt = VideoThumbnail(MediaToolRunner(binaries={"ffmpeg": str(tool)}), scratch)

    images = vt.generate_thumbnails(tmp_path / "clip.mp4", 20.0)
    assert len(images) == 4
    assert list(scratch.iterdir()) == []


# ---- timeout / cancel mid-extraction ------------------------------------------

_STALLING_FFMPEG = (
    "pathlib.Path(sys.argv[-1]).write_bytes(b'\\x89PNG partial')\n"
    "time.sleep(30)"
)


def _wait_for_partial(scratch, seen, stop):
    while not stop.is_set():
        if any(scratch.iterdir()):
            seen.append(True)
            return
        time.sleep(0.01)


def test_timeout_kills_ffmpeg_and_removes_partial_output(make_tool, scratch, tmp_path):
    tool = make_tool("ffmpeg", _STALLING_FFMPEG)
    runner = MediaToolRunner(binaries={"ffmpeg": str(tool)}, poll_interval=0.05)
    vt = VideoThumbnail(runner, scratch, timeout_sec=1.0)

    t0 = time.monotonic()
    with pytest.raises(ToolTimedOut) as ei:
        vt.generate_thumbnails(tmp_path / "clip.mp4", 10.0)

    assert ei.value.tool == "ffmpeg"
    assert time.monotonic() - t0 < 10
    assert list(scratch.iterdir()) == []


def test_cancel_kills_ffmpeg_and_removes_partial_output(make_tool, scratch, tmp_path):
    tool = make_tool("ffmpeg", _STALLING_FFMPEG)
    runner = MediaToolRunner(binaries={"ffmpeg": str(tool)}, poll_interval=0.05)
    vt = VideoThumbnail(runner, scratch, timeout_sec=20)
    cancel = threading.Event()
    seen, stop = [], threading.Event()

    def _cancel_once_written():
        _wait_for_partial(scratch, seen, stop)
        cancel.set()

    watcher = threading.Thread(target=_cancel_once_written)
    watcher.start()
    t0 = time.monotonic()
    try:
        with pytest.raises(InspectionCancelled):
            vt.generate_thumbnails(tmp_path / "clip.mp4", 10.0, cancel=cancel)
    finally:
        stop.set()
        watcher.join()

    assert seen == [True]  # the partial file did exist mid-run
    assert time.monotonic() - t0 < 15
    assert list(scratch.iterdir()) == []
