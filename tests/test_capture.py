import pytest

from tetrascan.drivers.base import GainSettings, HandleState, capture_window
from tetrascan.errors import CaptureError, HandleStateError, HardwareConfigureError, HardwareError


def test_handle_walks_idle_configured_receiving_closed(make_adapter) -> None:
    adapter = make_adapter()
    handle = adapter.open()
    assert handle.state is HandleState.IDLE
    adapter.configure(handle, 390_000_000, 1_000_000, GainSettings())
    assert handle.state is HandleState.CONFIGURED
    assert handle.frequency_hz == 390_000_000
    adapter.enter_receive_mode(handle)
    assert handle.state is HandleState.RECEIVING
    assert len(adapter.receive_chunk(handle)) == 3
    adapter.close(handle)
    assert handle.state is HandleState.CLOSED


def test_receive_before_rx_mode_is_rejected(make_adapter) -> None:
    adapter = make_adapter()
    handle = adapter.open()
    adapter.configure(handle, 390_000_000, 1_000_000, GainSettings())
    with pytest.raises(HandleStateError):
        adapter.receive_chunk(handle)


def test_rx_mode_requires_configuration(make_adapter) -> None:
    adapter = make_adapter()
    handle = adapter.open()
    with pytest.raises(HandleStateError):
        adapter.enter_receive_mode(handle)


def test_closed_handle_rejects_further_use(make_adapter) -> None:
    adapter = make_adapter()
    handle = adapter.open()
    adapter.close(handle)
    adapter.close(handle)
    assert adapter.closed == 1
    with pytest.raises(HandleStateError):
        adapter.configure(handle, 390_000_000, 1_000_000, GainSettings())


def test_driver_errors_are_wrapped_by_stage(make_adapter) -> None:
    adapter = make_adapter()

    def broken_configure(handle, frequency_hz, sample_rate_hz, gain):
        raise OSError("tuner rejected frequency")

    adapter._configure = broken_configure
    handle = adapter.open()
    with pytest.raises(HardwareConfigureError):
        adapter.configure(handle, 1, 1_000_000, GainSettings())
    assert handle.state is HandleState.IDLE


def test_capture_window_reads_until_duration_elapses(make_adapter, fake_clock) -> None:
    adapter = make_adapter(chunk_seconds=0.25)
    start = fake_clock.now()
    samples = capture_window(
        adapter,
        390_000_000,
        sample_rate_hz=1_000_000,
        gain=GainSettings(),
        capture_seconds=1.0,
        clock=fake_clock,
    )
    assert len(samples) == 4 * 3
    assert fake_clock.now() - start == pytest.approx(1.0)
    assert adapter.closed == 1


def test_capture_window_always_reads_one_chunk(make_adapter, fake_clock) -> None:
    adapter = make_adapter(chunk_seconds=5.0)
    samples = capture_window(
        adapter,
        390_000_000,
        sample_rate_hz=1_000_000,
        gain=GainSettings(),
        capture_seconds=1.0,
        clock=fake_clock,
    )
    assert len(samples) == 3


def test_capture_window_closes_handle_on_failure(make_adapter, fake_clock) -> None:
    adapter = make_adapter(fail_on=390_000_000)
    with pytest.raises(CaptureError):
        capture_window(
            adapter,
            390_000_000,
            sample_rate_hz=1_000_000,
            gain=GainSettings(),
            capture_seconds=1.0,
            clock=fake_clock,
        )
    assert adapter.closed == 1
    assert adapter.open_handles == 0


def _broken_close(handle, previous):
    raise RuntimeError("deactivateStream failed")


def test_close_failure_is_reported_as_hardware_error(make_adapter) -> None:
    adapter = make_adapter()
    adapter._close = _broken_close
    handle = adapter.open()
    with pytest.raises(HardwareError, match="deactivateStream failed"):
        adapter.close(handle)
    assert handle.state is HandleState.CLOSED


def test_capture_error_survives_close_failure(make_adapter, fake_clock) -> None:
    adapter = make_adapter(fail_on=380_000_000)
    adapter._close = _broken_close
    with pytest.raises(CaptureError, match="usb transfer failed"):
        capture_window(
            adapter,
            380_000_000,
            sample_rate_hz=1_000_000,
            gain=GainSettings(),
            capture_seconds=1.0,
            clock=fake_clock,
        )


def test_close_failure_after_clean_capture_is_raised(make_adapter, fake_clock) -> None:
    adapter = make_adapter()
    adapter._close = _broken_close
    with pytest.raises(HardwareError) as excinfo:
        capture_window(
            adapter,
            390_000_000,
            sample_rate_hz=1_000_000,
            gain=GainSettings(),
            capture_seconds=1.0,
            clock=fake_clock,
        )
    assert not isinstance(excinfo.value, CaptureError)
    assert excinfo.value.context["frequency_hz"] == 390_000_000
