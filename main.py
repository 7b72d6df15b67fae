import argparse
import logging
import sys
import threading

import cv2

import overlay
from exercise_logic import MODES, ExerciseCounter
from pose_detector import PoseDetector
from voice import Announcer
from workout_log import WorkoutLog

logger = logging.getLogger(__name__)

WINDOW_NAME = "FitFuel Rep Counter"
FRAME_WAIT = 0.5


class LatestFrame:
    """Single-slot hand-off between threads. A newer item replaces an unread one."""

    def __init__(self):
        self._cond = threading.Condition()
        self._item = None
        self.dropped = 0

    def put(self, item):
        with self._cond:
            if self._item is not None:
                self.dropped += 1
            self._item = item
            self._cond.notify()

    def get(self, timeout=None):
        with self._cond:
            if self._item is None:
                self._cond.wait(timeout)
            item, self._item = self._item, None
            return item


class PoseProcessor:
    def __init__(self, source=0, mirror=True):
        self.cap = cv2.VideoCapture(source)
        if not self.cap.isOpened():
            raise RuntimeError(f"Could not open video source {source!r}")
        self.mirror = mirror

    def read_frame(self):
        ret, frame = self.cap.read()
        if not ret:
            return None
        if self.mirror:
            frame = cv2.flip(frame, 1)
        return frame

    def release(self):
        self.cap.release()


class RepCounterApp:
    def __init__(self, processor, detector, counter, announcer=None, workout_log=None):
        self.processor = processor
        self.detector = detector
        self.counter = counter
        self.announcer = announcer
        self.workout_log = workout_log if workout_log is not None else WorkoutLog()
        self.frames = LatestFrame()
        self.stop_event = threading.Event()
        self.worker = None

    def handle_frame(self, frame):
        """Detect, count and annotate one frame. Returns ``(annotated, payload)``."""
        before = self.counter.count
        landmarks = self.detector.detect(frame)
        payload = self.counter.process(landmarks)

        if payload is not None and payload.count > before:
            self.workout_log.record(payload)
            if self.announcer is not None:
                self.announcer.announce_rep(payload.count)

        out = frame.copy()
        overlay.draw_landmarks(out, landmarks)
        overlay.draw_hud(out, payload, self.counter.snapshot())
        return out, payload

    def video_loop(self):
        try:
            while not self.stop_event.is_set():
                frame = self.processor.read_frame()
                if frame is None:
                    logger.info("End of video stream")
                    break
                self.frames.put(self.handle_frame(frame))
        except Exception:
            logger.exception("Frame processing failed")
        finally:
            self.stop_event.set()

    def start(self):
        self.worker = threading.Thread(target=self.video_loop, daemon=True)
        self.worker.start()

    def stop(self):
        self.stop_event.set()
        if self.worker is not None:
            self.worker.join()

    def show(self, item):
        """Display one annotated frame. Returns True when the user asked to quit."""
        out, _ = item
        cv2.imshow(WINDOW_NAME, out)
        key = cv2.waitKey(1) & 0xFF
        return key in (ord('q'), 27)

    def run(self):
        self.start()
        try:
            quit_requested = False
            while not self.stop_event.is_set():
                item = self.frames.get(timeout=FRAME_WAIT)
                if item is not None and self.show(item):
                    quit_requested = True
                    break
            if not quit_requested:
                # last frame published before the stream ended
                item = self.frames.get(timeout=0)
                if item is not None:
                    self.show(item)
        finally:
            self.stop()
            cv2.destroyAllWindows()
        logger.info("Session finished: %d reps, %d frames dropped",
                    self.counter.count, self.frames.dropped)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Count squat reps from a live pose overlay")
    parser.add_argument("--camera", type=int, default=0, help="Camera index")
    parser.add_argument("--video", default=None, help="Read frames from a video file instead of a camera")
    parser.add_argument("--mode", choices=MODES, default="literal",
                        help="Stage transition rules. 'literal' never reaches the Down stage and "
                             "so never counts a rep; use 'corrected' to count reps")
    parser.add_argument("--no-mirror", action="store_true", help="Do not flip frames horizontally")
    parser.add_argument("--min-visibility", type=float, default=0.0,
                        help="Treat landmarks below this visibility as missing")
    parser.add_argument("--no-voice", action="store_true", help="Disable spoken rep callouts")
    parser.add_argument("--log-dir", default=".", help="Directory for the CSV workout log")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    source = args.video if args.video is not None else args.camera
    try:
        processor = PoseProcessor(source, mirror=not args.no_mirror)
    except RuntimeError as e:
        logger.error("%s", e)
        return 1

    detector = None
    app = None
    try:
        detector = PoseDetector(min_visibility=args.min_visibility)
        app = RepCounterApp(
            processor,
            detector,
            ExerciseCounter(mode=args.mode),
            announcer=Announcer(enabled=not args.no_voice),
        )
        app.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        processor.release()
        if detector is not None:
            detector.close()
        if app is not None:
            app.workout_log.save(args.log_dir)
    return 0


if __name__ == '__main__':
    sys.exit(main())
