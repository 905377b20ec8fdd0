"""Command-line entry point: ``motionlog record`` and ``motionlog inspect``."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .analysis.rate import estimate_rate_hz
from .config.runtime import MotionLogConfig, config_from_mapping, load_config
from .core.dispatch import DispatchQueue
from .core.display import LatestValuesDisplay
from .core.recorder import MotionRecorder
from .dataio.file_paths import kind_from_path, session_timestamp_from_path
from .dataio.log_loader import load_array
from .sources.replay import ReplaySource
from .sources.simulated import SimulatedSource

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    # Shared by every subparser; SUPPRESS so a subcommand never resets a
    # level given before it.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--log-level", default=argparse.SUPPRESS,
                        help="Logging level (DEBUG, INFO, WARNING, ...)")

    ap = argparse.ArgumentParser(prog="motionlog", description="Record and inspect motion-sensor logs.",
                                 parents=[common])
    ap.set_defaults(log_level="INFO")
    sub = ap.add_subparsers(dest="command", required=True)

    rec = sub.add_parser("record", parents=[common],
                         help="Record one session (simulated or replayed samples)")
    rec.add_argument("--config", type=str, default=None, help="YAML config file")
    rec.add_argument("--out", type=str, default=None, help="Output folder for session logs")
    rec.add_argument("--interval", type=float, default=None, help="Update interval in seconds")
    rec.add_argument("--duration", type=float, default=5.0, help="Recording time in seconds (simulated source)")
    rec.add_argument("--kinds", type=str, default=None,
                     help="Comma-separated kinds: deviceMotion,accelerometers,gyroscope")
    rec.add_argument("--replay", type=str, nargs="+", default=None,
                     help="Replay these log files instead of simulating")
    rec.add_argument("--error-rate", type=float, default=None,
                     help="Fraction of simulated deliveries that fail")
    rec.add_argument("--seed", type=int, default=None, help="Seed for the simulated source")

    ins = sub.add_parser("inspect", parents=[common], help="Summarise recorded log files")
    ins.add_argument("paths", nargs="+", help="Log files to summarise")
    return ap


def _resolve_config(args: argparse.Namespace) -> MotionLogConfig:
    cfg = load_config(args.config)
    overrides = {
        "update_interval_s": cfg.update_interval_s,
        "out_dir": cfg.out_dir,
        "kinds": cfg.kinds,
        "simulated_error_rate": cfg.simulated_error_rate,
        "seed": cfg.seed,
    }
    if args.interval is not None:
        overrides["update_interval_s"] = args.interval
    if args.out is not None:
        overrides["out_dir"] = args.out
    if args.kinds is not None:
        overrides["kinds"] = args.kinds
    if args.error_rate is not None:
        overrides["simulated_error_rate"] = args.error_rate
    if args.seed is not None:
        overrides["seed"] = args.seed
    return config_from_mapping(overrides)


def run_record(args: argparse.Namespace) -> int:
    try:
        cfg = _resolve_config(args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    out_dir = cfg.resolved_out_dir()
    display = LatestValuesDisplay()
    dispatch: Optional[DispatchQueue] = None

    if args.replay:
        try:
            source = ReplaySource.from_files(args.replay)
        except (OSError, ValueError) as exc:
            logger.error("Cannot replay %s: %s", " ".join(args.replay), exc)
            return 2
    else:
        dispatch = DispatchQueue()
        source = SimulatedSource(
            dispatch,
            cfg.sensor_kinds,
            error_rate=cfg.simulated_error_rate,
            seed=cfg.seed,
        )

    recorder = MotionRecorder(
        source,
        out_dir,
        update_interval_s=cfg.update_interval_s,
        kinds=cfg.sensor_kinds,
        display=display,
        dispatch=dispatch,
    )

    session = recorder.start()
    if session is None:
        return 1
    try:
        if isinstance(source, ReplaySource):
            delivered = source.pump()
            logger.info("Replayed %d deliveries", delivered)
        else:
            deadline = time.monotonic() + max(0.0, args.duration)
            while time.monotonic() < deadline:
                time.sleep(min(0.1, max(0.0, deadline - time.monotonic())))
    except KeyboardInterrupt:
        logger.info("Interrupted; saving session")
    finally:
        results = recorder.stop()
        if dispatch is not None:
            dispatch.close()

    for kind in recorder.kinds:
        count = recorder.counts.get(kind, 0)
        if count == 0:
            status = "no data"
        else:
            status = "saved" if results.get(kind) else "FAILED"
        print(
            f"{session.file_name(kind)}: {count} lines, "
            f"{recorder.dropped.get(kind, 0)} dropped ({status})"
        )
    failed = [kind for kind, ok in results.items() if not ok and recorder.counts.get(kind, 0)]
    return 1 if failed else 0


def run_inspect(args: argparse.Namespace) -> int:
    status = 0
    for raw in args.paths:
        path = Path(raw)
        kind = kind_from_path(path)
        if kind is None or not path.exists():
            logger.error("Not a motion log: %s", path)
            status = 1
            continue
        data = load_array(path, kind)
        started = session_timestamp_from_path(path)
        started_text = f"{started:%Y-%m-%d %H:%M:%S}" if started is not None else "unknown"
        if data.shape[0] == 0:
            print(f"{path.name}: {kind.value}, empty")
            continue
        t = data[:, 0]
        span = float(t[-1] - t[0])
        rate = estimate_rate_hz(t)
        print(
            f"{path.name}: {kind.value}, session {started_text}, "
            f"{data.shape[0]} samples, {span:.3f} s, ~{rate:.1f} Hz"
        )
    return status


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "record":
        return run_record(args)
    return run_inspect(args)


if __name__ == "__main__":
    sys.exit(main())
