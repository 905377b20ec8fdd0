import pathlib
import sys
import tempfile
import unittest

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from motionlog.core.sample_logger import LoggerState, SampleLogger  # noqa: E402


class SampleLoggerTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = pathlib.Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_save_writes_lines_in_append_order(self):
        path = self.tmpdir / "20160101000000_gyroscope.txt"
        sample_logger = SampleLogger(path)
        lines = [f"timestamp: {i * 0.01!r}, x: {i!r}.0" for i in range(25)]
        for line in lines:
            sample_logger.append(line)

        self.assertTrue(sample_logger.save())

        text = path.read_text(encoding="utf-8")
        self.assertTrue(text.endswith("\n"))
        self.assertEqual(text.splitlines(), lines)

    def test_save_on_empty_buffer_writes_nothing(self):
        path = self.tmpdir / "empty.txt"
        sample_logger = SampleLogger(path)

        self.assertFalse(sample_logger.save())
        self.assertFalse(path.exists())
        self.assertEqual(sample_logger.state, LoggerState.ACCUMULATING)

    def test_save_releases_buffer_and_marks_saved(self):
        sample_logger = SampleLogger(self.tmpdir / "log.txt")
        sample_logger.append("a")
        sample_logger.save()

        self.assertEqual(len(sample_logger), 0)
        self.assertEqual(sample_logger.state, LoggerState.SAVED)

        sample_logger.append("b")
        self.assertEqual(sample_logger.state, LoggerState.ACCUMULATING)

    def test_second_save_keeps_file_unchanged(self):
        path = self.tmpdir / "log.txt"
        sample_logger = SampleLogger(path)
        for line in ("a", "b", "c"):
            sample_logger.append(line)

        self.assertTrue(sample_logger.save())
        self.assertFalse(sample_logger.save())

        self.assertEqual(path.read_text(encoding="utf-8"), "a\nb\nc\n")

    def test_save_overwrites_existing_content(self):
        path = self.tmpdir / "log.txt"
        path.write_text("old\nstuff\nhere\n", encoding="utf-8")
        sample_logger = SampleLogger(path)
        sample_logger.append("new")

        sample_logger.save()

        self.assertEqual(path.read_text(encoding="utf-8"), "new\n")

    def test_save_creates_missing_directories(self):
        path = self.tmpdir / "nested" / "deeper" / "log.txt"
        sample_logger = SampleLogger(path)
        sample_logger.append("x")

        self.assertTrue(sample_logger.save())
        self.assertTrue(path.exists())

    def test_failed_save_is_reported_and_keeps_buffer(self):
        blocker = self.tmpdir / "blocker"
        blocker.write_text("", encoding="utf-8")
        sample_logger = SampleLogger(blocker / "log.txt")
        sample_logger.append("a")
        sample_logger.append("b")

        with self.assertLogs("motionlog.core.sample_logger", level="ERROR"):
            ok = sample_logger.save()

        self.assertFalse(ok)
        self.assertIsInstance(sample_logger.last_error, OSError)
        self.assertEqual(sample_logger.lines, ("a", "b"))
        self.assertEqual(sample_logger.state, LoggerState.ACCUMULATING)

    def test_retry_after_failure_succeeds(self):
        target_dir = self.tmpdir / "later"
        target_dir.write_text("", encoding="utf-8")
        sample_logger = SampleLogger(target_dir / "log.txt")
        sample_logger.append("kept")

        with self.assertLogs("motionlog.core.sample_logger", level="ERROR"):
            self.assertFalse(sample_logger.save())

        target_dir.unlink()
        self.assertTrue(sample_logger.save())
        self.assertIsNone(sample_logger.last_error)
        self.assertEqual((target_dir / "log.txt").read_text(encoding="utf-8"), "kept\n")

    def test_lines_is_a_snapshot(self):
        sample_logger = SampleLogger(self.tmpdir / "log.txt")
        sample_logger.append("a")
        snapshot = sample_logger.lines
        sample_logger.append("b")

        self.assertEqual(snapshot, ("a",))
        self.assertEqual(len(sample_logger), 2)

    def test_embedded_line_breaks_stay_on_one_line(self):
        path = self.tmpdir / "log.txt"
        sample_logger = SampleLogger(path)
        sample_logger.append("a\nb")
        sample_logger.append("c\r\nd")
        sample_logger.append("e")

        self.assertTrue(sample_logger.save())

        lines = path.read_text(encoding="utf-8").splitlines()
        self.assertEqual(lines, ["a\\nb", "c\\r\\nd", "e"])


if __name__ == "__main__":
    unittest.main()
