import pytest
from PySide6.QtCore import QRect, QRectF

import config
from capture_session import CaptureInitError, CaptureSession
from code_recognition import RecognitionEvent
from code_scanner import CodeScanner
from fakes import FakeCapture, FakeRecognizer, square_code

VIEW = (400, 800)  # scan window: x 40..360, y 239.5..560.5


class BrokenSession:
    def __init__(self, message):
        self.message = message

    def configure(self):
        raise CaptureInitError(self.message)


@pytest.fixture
def scanner(qapp):
    widget = CodeScanner(session_factory=lambda: CaptureSession(
        device_factory=lambda index: FakeCapture(),
        recognizer_factory=FakeRecognizer,
    ))
    widget.resize(*VIEW)
    yield widget
    widget.close()
    widget.deleteLater()


def event_with(*codes, frame_size=VIEW):
    return RecognitionEvent(codes=tuple(codes), frame_size=frame_size)


def assert_default_labels(scanner):
    assert scanner.code_type_label.text() == config.CODE_TYPE_PREFIX
    assert scanner.code_data_label.text() == config.CODE_DATA_PREFIX


def test_initial_state(scanner):
    assert scanner.overlay.isHidden()
    assert scanner.preview is None
    assert_default_labels(scanner)


def test_empty_event_hides_overlay(scanner):
    scanner.handle_recognition_event(event_with())
    assert scanner.overlay.isHidden()
    assert scanner.overlay_region is None
    assert_default_labels(scanner)


def test_code_inside_scan_window_is_focused(scanner):
    scanner.handle_recognition_event(event_with(square_code(100, 300, 100, "EAN13", "4006381333931")))

    assert not scanner.overlay.isHidden()
    assert scanner.overlay_color == config.FOCUSED_COLOR
    assert scanner.overlay_region == QRectF(100, 300, 100, 100)
    assert scanner.overlay.geometry() == QRect(100, 300, 100, 100)
    assert scanner.code_type_label.text() == "Code Type: EAN13"
    assert scanner.code_data_label.text() == "Data: 4006381333931"


def test_code_partly_outside_scan_window_is_unfocused(scanner):
    scanner.handle_recognition_event(event_with(square_code(20, 300, 100)))

    assert not scanner.overlay.isHidden()
    assert scanner.overlay_color == config.UNFOCUSED_COLOR
    assert scanner.overlay_region == QRectF(20, 300, 100, 100)
    assert_default_labels(scanner)


def test_code_fully_outside_scan_window_is_unfocused(scanner):
    scanner.handle_recognition_event(event_with(square_code(100, 650, 80)))

    assert not scanner.overlay.isHidden()
    assert scanner.overlay_color == config.UNFOCUSED_COLOR
    assert_default_labels(scanner)


def test_each_event_replaces_previous_state(scanner):
    scanner.handle_recognition_event(event_with(square_code(100, 300, 100)))
    scanner.handle_recognition_event(event_with())

    assert scanner.overlay.isHidden()
    assert_default_labels(scanner)

    scanner.handle_recognition_event(event_with(square_code(100, 300, 100, text="again")))
    scanner.handle_recognition_event(event_with(square_code(0, 0, 50)))

    assert scanner.overlay_color == config.UNFOCUSED_COLOR
    assert_default_labels(scanner)


def test_only_first_code_is_used(scanner):
    outside = square_code(0, 0, 50, "QR", "outside")
    inside = square_code(100, 300, 100, "QR", "inside")
    scanner.handle_recognition_event(event_with(outside, inside))

    assert scanner.overlay_color == config.UNFOCUSED_COLOR
    assert scanner.overlay_region == QRectF(0, 0, 50, 50)
    assert_default_labels(scanner)


def test_missing_text_shows_empty_data(scanner):
    scanner.handle_recognition_event(event_with(square_code(100, 300, 100, "PDF417", None)))
    assert scanner.code_type_label.text() == "Code Type: PDF417"
    assert scanner.code_data_label.text() == "Data: "


def test_frame_coordinates_are_mapped_to_view(scanner):
    code = square_code(50, 150, 50)
    scanner.handle_recognition_event(event_with(code, frame_size=(200, 400)))

    assert scanner.overlay_region == QRectF(100, 300, 100, 100)
    assert scanner.overlay_color == config.FOCUSED_COLOR


def test_late_event_after_stop_is_ignored(scanner):
    scanner.handle_recognition_event(event_with(square_code(100, 300, 100, text="kept")))
    scanner.stop_capture()
    scanner.handle_recognition_event(event_with())

    assert not scanner.overlay.isHidden()
    assert scanner.code_data_label.text() == "Data: kept"


def test_activation_installs_preview(scanner):
    assert scanner.activate()
    assert scanner.preview is not None
    assert scanner.preview.geometry() == QRect(0, 0, *VIEW)
    assert scanner.session.is_configured
    assert not scanner.session.is_running


@pytest.mark.parametrize("message", [
    "Unable to create capture device",
    "Unable to create capture device input",
    "Unable to add capture metadata output",
])
def test_activation_failure_shows_error_without_preview(qapp, message):
    widget = CodeScanner(session_factory=lambda: BrokenSession(message))
    alerts = []
    widget.show_alert = lambda title, text: alerts.append((title, text))

    assert not widget.activate()
    assert alerts == [("Error", message)]
    assert widget.preview is None
    assert widget.session is None

    # Nothing to start
    widget.start_capture()
    assert widget.session is None
    widget.deleteLater()


def test_unreadable_camera_fails_activation(qapp):
    capture = FakeCapture(good_reads=0)
    widget = CodeScanner(session_factory=lambda: CaptureSession(
        device_factory=lambda index: capture,
        recognizer_factory=FakeRecognizer,
    ))
    alerts = []
    widget.show_alert = lambda title, text: alerts.append((title, text))

    assert not widget.activate()
    assert alerts == [("Error", "Unable to create capture device input")]
    assert widget.preview is None
    assert capture.released
    widget.deleteLater()


def test_worker_error_stops_and_alerts(scanner):
    alerts = []
    scanner.show_alert = lambda title, text: alerts.append((title, text))

    scanner.handle_worker_error("Lost connection to the capture device")

    assert alerts == [("Error", "Lost connection to the capture device")]
    scanner.handle_worker_error("late")
    assert len(alerts) == 1
