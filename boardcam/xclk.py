"""Settings for the PWM timer and channel that drive the camera clock."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TimerConfig:
    timer_num: int
    freq_hz: int
    duty_resolution: int = 2
    high_speed: bool = True
    auto_clock: bool = True


@dataclass(frozen=True)
class ChannelConfig:
    gpio_num: int
    channel: int
    timer_sel: int
    duty: int = 2
    hpoint: int = 0
    high_speed: bool = True
    interrupt_enabled: bool = False


@dataclass(frozen=True)
class ClockSettings:
    timer: TimerConfig
    channel: ChannelConfig


def clock_settings(pin_xclk: int, ledc_timer: int, ledc_channel: int, xclk_freq_hz: int) -> ClockSettings:
    """Return the timer and channel setup for a square clock on ``pin_xclk``."""
    if xclk_freq_hz <= 0:
        raise ValueError(f"clock frequency must be positive, got {xclk_freq_hz}")
    for name, value in (("pin", pin_xclk), ("timer", ledc_timer), ("channel", ledc_channel)):
        if value < 0:
            raise ValueError(f"{name} must not be negative, got {value}")
    timer = TimerConfig(timer_num=ledc_timer, freq_hz=xclk_freq_hz)
    channel = ChannelConfig(gpio_num=pin_xclk, channel=ledc_channel, timer_sel=ledc_timer)
    return ClockSettings(timer=timer, channel=channel)