import numpy as np

from conftest import make_frame
from depthsperite import decode_capture
from depthsperite.core.session import CaptureSession
from depthsperite.core.storage import PngWriter, load_capture


def test_png_keeps_rgba_exactly(tmp_path):
    canvas = np.random.default_rng(5).integers(0, 256, size=(20, 30, 4), dtype=np.uint8)
    path = PngWriter(str(tmp_path)).write(canvas)

    assert path.endswith(".png")
    assert (load_capture(path) == canvas).all()


def test_saved_capture_decodes_from_disk(tmp_path, observer, color_image):
    session = CaptureSession(observer=observer, writer=PngWriter(str(tmp_path)))
    session.request_capture()
    session.on_synchronized_frames(make_frame(650.0), color_image)
    (path,) = observer.saved

    decoded = decode_capture.decode_file(path, depth_shape=(32, 32))
    assert decoded.depth_min == 450.0
    assert abs(decoded.depths[-1, -1] - 650.0) <= 1.1


def test_cli_writes_depth_map(tmp_path, observer, color_image):
    session = CaptureSession(observer=observer, writer=PngWriter(str(tmp_path)))
    session.request_capture()
    session.on_synchronized_frames(make_frame(900.0), color_image)
    (path,) = observer.saved

    out = tmp_path / "depth.npy"
    assert decode_capture.main([path, "--width", "32", "--height", "32", "-o", str(out)]) == 0
    depths = np.load(out)
    assert depths.shape == (32, 32)
    assert np.isnan(depths[0, 0])
    assert abs(depths[-1, -1] - 900.0) <= 1.1


def test_cli_reports_unreadable_file(tmp_path):
    bogus = tmp_path / "not_an_image.png"
    bogus.write_text("hello")
    assert decode_capture.main([str(bogus)]) == 1
