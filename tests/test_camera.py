from holodraw.camera import Camera
from holodraw.config import CameraConfig


def test_no_frame_before_start():
    cam = Camera(CameraConfig(width=640, height=480))
    assert cam.read() is None
    assert cam.get_frame() is None
    assert (cam.width, cam.height) == (640, 480)


def test_stop_without_start_is_safe():
    cam = Camera()
    cam.stop()
    assert cam.cap is None
