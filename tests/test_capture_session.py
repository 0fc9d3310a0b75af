import time

import pytest

from capture_session import CaptureInitError, CaptureSession
from code_recognition import RecognitionEvent
from fakes import FakeCapture, FakeRecognizer, square_code


def wait_for(qapp, condition, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not condition() and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)
    return condition()


def make_session(capture=None, recognizer=None):
    capture = capture or FakeCapture()
    recognizer = recognizer or FakeRecognizer()
    return CaptureSession(
        device_factory=lambda index: capture,
        recognizer_factory=lambda: recognizer,
    )


def test_configure_records_frame_size(qapp):
    session = make_session(FakeCapture(width=64, height=48))
    session.configure()
    assert session.is_configured
    assert session.frame_size == (64, 48)
    session.release()


def test_unopened_device_fails(qapp):
    capture = FakeCapture(opened=False)
    session = make_session(capture)
    with pytest.raises(CaptureInitError, match="Unable to create capture device$"):
        session.configure()
    assert not session.is_configured
    assert capture.released


def test_device_without_frames_fails(qapp):
    capture = FakeCapture(good_reads=0)
    session = make_session(capture)
    with pytest.raises(CaptureInitError, match="Unable to create capture device input"):
        session.configure()
    assert capture.released


def test_recognizer_without_engines_fails(qapp):
    capture = FakeCapture()
    session = make_session(capture, FakeRecognizer(has_engines=False))
    with pytest.raises(CaptureInitError, match="Unable to add capture metadata output"):
        session.configure()
    assert capture.released


def test_start_before_configure_is_ignored(qapp):
    session = make_session()
    session.start_running()
    assert session.worker is None
    assert not session.is_running


def test_start_and_stop_are_idempotent(qapp):
    session = make_session()
    session.configure()

    session.start_running()
    worker = session.worker
    assert session.is_running

    session.start_running()
    assert session.worker is worker

    session.stop_running()
    assert session.worker is None
    assert not session.is_running
    assert not worker.isRunning()

    session.stop_running()
    assert session.worker is None
    session.release()


def test_recognition_events_reach_the_ui_thread(qapp):
    code = square_code(10, 10, 20)
    recognizer = FakeRecognizer(codes=[code])
    session = make_session(recognizer=recognizer)
    session.configure()

    received = []
    session.event_signal.connect(received.append)
    session.start_running()
    try:
        assert wait_for(qapp, lambda: received)
    finally:
        session.stop_running()

    event = received[0]
    assert isinstance(event, RecognitionEvent)
    assert event.first == code
    assert event.frame_size == (64, 48)
    session.release()


def test_lost_device_reports_error(qapp):
    session = make_session(FakeCapture(good_reads=1))
    session.configure()

    errors = []
    session.error_signal.connect(errors.append)
    session.start_running()
    try:
        assert wait_for(qapp, lambda: errors)
    finally:
        session.stop_running()

    assert errors == ["Lost connection to the capture device"]
    session.release()


def test_release_closes_device(qapp):
    capture = FakeCapture()
    session = make_session(capture)
    session.configure()
    session.start_running()
    session.release()

    assert capture.released
    assert session.worker is None
    assert not session.is_configured
