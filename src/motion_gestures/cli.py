"""Motion gestures CLI.

Usage:
    motion-gestures replay       — Run a recorded pose session through the detectors
    motion-gestures simulate     — Generate a synthetic twist/thrust and detect it
    motion-gestures init-config  — Write the default configuration as YAML
    motion-gestures benchmark    — Measure per-tick detection latency
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

try:
    import typer
except ImportError:
    raise ImportError("typer is required for CLI. Install with: pip install typer")

from motion_gestures.config import ConfigError, GestureConfig
from motion_gestures.events import (
    GestureEvent,
    RotationContinuing,
    RotationEnded,
    RotationStarted,
    ThrustEvent,
)
from motion_gestures.metrics import MetricsCollector
from motion_gestures.tracker import MotionTracker

app = typer.Typer(
    name="motion-gestures",
    help="Twist and thrust detection for 6-DoF tracked controllers.",
    add_completion=False,
)


@app.callback()
def main_options(
    log_level: str = typer.Option("warning", help="Log level"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Optional[str]) -> GestureConfig:
    if not path:
        return GestureConfig()
    try:
        return GestureConfig.from_yaml(path)
    except FileNotFoundError:
        typer.echo(f"Config not found: {path}", err=True)
        raise typer.Exit(1)
    except ConfigError as e:
        typer.echo(f"Invalid config {path}: {e}", err=True)
        raise typer.Exit(1)


def _format_event(event: GestureEvent, verbose: bool) -> Optional[str]:
    if isinstance(event, RotationStarted):
        return (
            f"[{event.timestamp:8.3f}] hand {event.hand_id} twist started  "
            f"axis={event.axis_label} angle={event.total_angle_deg:.1f}°"
        )
    if isinstance(event, RotationContinuing):
        if not verbose:
            return None
        return (
            f"[{event.timestamp:8.3f}] hand {event.hand_id} twisting       "
            f"axis={event.axis_label} frame={event.frame_angle_deg:+.2f}°"
        )
    if isinstance(event, RotationEnded):
        return (
            f"[{event.timestamp:8.3f}] hand {event.hand_id} twist ended    "
            f"total={event.total_angle_deg:.1f}°"
        )
    if isinstance(event, ThrustEvent):
        return (
            f"[{event.timestamp:8.3f}] hand {event.hand_id} {event.direction:<14s} "
            f"distance={event.displacement_m:+.3f} m velocity={event.velocity_m_per_sec:.2f} m/s"
        )
    return None


def _run(tracker: MotionTracker, records, verbose: bool) -> int:
    count = 0
    for hand_id, sample in records:
        for event in tracker.update(sample, hand_id=hand_id):
            count += 1
            line = _format_event(event, verbose)
            if line:
                typer.echo(line)
    return count


def _summary(metrics: MetricsCollector):
    typer.echo("\nSummary:")
    for kind, count in sorted(metrics.rotation_counts.items()):
        typer.echo(f"   twist {kind:<12s} {count}")
    for direction, count in sorted(metrics.thrust_counts.items()):
        typer.echo(f"   {direction:<18s} {count}")
    typer.echo(f"   ticks              {metrics.ticks_total} ({metrics.skipped_total} skipped)")


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to a .json or .npz pose recording"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print continuing twist events"),
):
    """Replay a recorded pose session through the detectors."""
    from motion_gestures.recorder import PosePlayer

    path = Path(recording)
    if not path.exists():
        typer.echo(f"Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    try:
        player = PosePlayer.load(path)
    except (ValueError, KeyError) as e:
        typer.echo(f"Could not read {recording}: {e}", err=True)
        raise typer.Exit(1)

    metrics = MetricsCollector()
    tracker = MotionTracker(_load_config(config), metrics=metrics)
    typer.echo(
        f"Replaying {path.name} ({player.sample_count} samples, "
        f"{player.duration:.2f}s, hands {player.hand_ids})"
    )

    _run(tracker, ((r.hand_id, r.sample) for r in player.play()), verbose)
    _summary(metrics)


@app.command()
def simulate(
    gesture: str = typer.Argument("twist", help="twist, thrust or pull"),
    rate: float = typer.Option(60.0, help="Sample rate in Hz"),
    jitter: bool = typer.Option(False, help="Add sensor noise"),
    seed: int = typer.Option(0, help="Noise seed"),
    output: Optional[str] = typer.Option(None, "-o", help="Save the generated session"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print continuing twist events"),
):
    """Generate a synthetic gesture and run it through the detectors."""
    from motion_gestures.recorder import PoseRecorder
    from motion_gestures.synthetic import SyntheticStream, add_jitter

    cfg = _load_config(config)
    stream = SyntheticStream(rate_hz=rate).hold(0.3)
    if gesture == "twist":
        stream.twist(axis=(0.0, 0.0, 1.0), degrees=90.0, duration=0.75)
    elif gesture == "thrust":
        stream.thrust(distance_m=cfg.thrust.distance_threshold_m * 1.5, duration=0.15)
    elif gesture == "pull":
        stream.thrust(distance_m=-cfg.thrust.distance_threshold_m * 1.5, duration=0.15)
    else:
        typer.echo(f"Unknown gesture: {gesture} (expected twist, thrust or pull)", err=True)
        raise typer.Exit(1)
    stream.hold(0.5)

    samples = stream.samples
    if jitter:
        samples = add_jitter(samples, seed=seed)

    if output:
        recorder = PoseRecorder()
        recorder.start()
        recorder.extend(samples)
        recorder.stop()
        saved = recorder.save_compact(output) if output.endswith(".npz") else recorder.save(output)
        typer.echo(f"Saved {len(samples)} samples to {saved}")

    metrics = MetricsCollector()
    tracker = MotionTracker(cfg, metrics=metrics)
    typer.echo(f"Simulating {gesture} ({len(samples)} samples at {rate:g} Hz)")
    _run(tracker, ((0, s) for s in samples), verbose)
    _summary(metrics)


@app.command("init-config")
def init_config(
    path: str = typer.Argument("gestures.yml", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
):
    """Write the default detector configuration as YAML."""
    target = Path(path)
    if target.exists() and not force:
        typer.echo(f"{path} already exists (use --force to overwrite)", err=True)
        raise typer.Exit(1)

    GestureConfig().to_yaml(target)
    typer.echo(f"Wrote default configuration to {path}")


@app.command()
def benchmark(
    iterations: int = typer.Option(5000, help="Number of samples to process"),
    hands: int = typer.Option(1, help="Simulated tracked devices"),
):
    """Measure per-tick detection latency on synthetic motion."""
    from motion_gestures.synthetic import SyntheticStream, add_jitter

    stream = SyntheticStream(rate_hz=90.0)
    while len(stream.samples) < iterations:
        stream.twist(degrees=60.0, duration=0.5).hold(0.2).thrust(0.15, 0.2).thrust(-0.15, 0.2)
    samples = add_jitter(stream.samples[:iterations], seed=42)

    typer.echo(f"Running benchmark: {iterations} samples, {hands} hand(s)")
    tracker = MotionTracker()
    times = []
    events = 0
    for sample in samples:
        for hand_id in range(hands):
            t0 = time.perf_counter()
            events += len(tracker.update(sample, hand_id=hand_id))
            times.append(time.perf_counter() - t0)

    avg_us = sum(times) / len(times) * 1e6
    p95_us = sorted(times)[int(len(times) * 0.95)] * 1e6
    typer.echo("\nResults:")
    typer.echo(f"   Average latency: {avg_us:.1f} us")
    typer.echo(f"   P95 latency:     {p95_us:.1f} us")
    typer.echo(f"   Events:          {events}")


def main():
    app()


if __name__ == "__main__":
    main()
