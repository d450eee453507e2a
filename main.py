import argparse
import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC_DIR = ROOT / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from lyricloop.core.config import PROFILES, get_profile
from lyricloop.core.state import AppState, Notify
from lyricloop.core.timeline import gap_report
from lyricloop.lyrics.lrc import default_lyrics, format_timestamp, load_lrc
from lyricloop.library.track_probe import probe_duration, sidecar_lrc_path

logger = logging.getLogger("lyricloop")

def configure_logging() -> None:
    level = os.getenv("LYRICLOOP_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="lyricloop", description="Loop a track with its lyrics scrolling in sync.")
    parser.add_argument("lrc", nargs="?", help="LRC file (default: the bundled lyric sheet)")
    parser.add_argument("--audio", help="audio file to loop")
    parser.add_argument("--profile", choices=sorted(PROFILES), help="tuning profile (default: $LYRICLOOP_PROFILE or desktop)")
    parser.add_argument("--analyze", action="store_true", help="print the line interval report and exit")
    return parser.parse_args(argv)

def resolve_lines(args: argparse.Namespace):
    if args.lrc:
        return load_lrc(args.lrc)
    if args.audio:
        sidecar = sidecar_lrc_path(args.audio)
        if sidecar is not None:
            return load_lrc(sidecar)
    return default_lyrics()

def print_gap_report(lines) -> None:
    report = gap_report(lines)
    print(f"{len(lines)} lines")
    print("\nLargest intervals:")
    for g in report.largest:
        print(f"  #{g.from_index:>3} -> #{g.to_index:<3} {format_timestamp(g.from_time)} -> "
              f"{format_timestamp(g.to_time)}  {g.interval:6.2f}s  {lines[g.to_index].text or '(rest)'}")
    print(f"\nIntervals over 5s: {len(report.over_threshold)}")
    print(f"Average {report.average:.2f}s  min {report.minimum:.2f}s  max {report.maximum:.2f}s")

def init_app_state(args: argparse.Namespace, lines) -> AppState:
    from lyricloop.core.engine import Engine
    from lyricloop.player.player import Player

    app_state = AppState()
    app_state.lines = list(lines)
    app_state.config = get_profile(args.profile)
    app_state.audio_path = Path(args.audio) if args.audio else None

    duration = probe_duration(app_state.audio_path) if app_state.audio_path else None

    if app_state.audio_path is not None:
        try:
            app_state.player = Player()
        except Exception as e:
            app_state.player = None
            app_state.queued_notifications.append(
                Notify(message=f"Failed to initialize audio player: {e}", notify_type="error")
            )
    else:
        app_state.queued_notifications.append(
            Notify(message="No audio file given; lyrics only.", notify_type="warn")
        )

    app_state.engine = Engine(app_state.lines, app_state.player, config=app_state.config, duration=duration)
    return app_state

def main(argv=None) -> int:
    configure_logging()
    args = parse_args(argv)

    try:
        lines = resolve_lines(args)
    except OSError as e:
        logger.error("Could not read lyrics: %s", e)
        return 1

    if args.analyze:
        print_gap_report(lines)
        return 0

    from PySide6.QtWidgets import QApplication
    from lyricloop.ui.main_window import MainWindow

    qt_app = QApplication(sys.argv[:1])

    app_state = init_app_state(args, lines)
    main_window = MainWindow(app_state)
    main_window.show()

    if app_state.player is not None:
        app_state.player.load(str(app_state.audio_path))
        app_state.player.play()

    return qt_app.exec()

if __name__ == "__main__":
    raise SystemExit(main())
