import contextlib
import io
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from foldercast import cli


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(self._temp_dir.cleanup)
        self.base = Path(self._temp_dir.name)
        self.root = self.base / "podcasts"
        self.root.mkdir()
        self.log_dir = self.base / "logs"
        for patcher in (
            mock.patch.dict(os.environ, {}, clear=True),
            mock.patch("foldercast.config.load_dotenv"),
            mock.patch("foldercast.config.load_user_config", return_value={}),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)
        self.addCleanup(self._reset_logger)

    def _reset_logger(self) -> None:
        logger = logging.getLogger("foldercast")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def _args(self, *extra: str) -> list[str]:
        return [
            "--root",
            str(self.root),
            "--share-url",
            "https://host/s",
            "--log-dir",
            str(self.log_dir),
            *extra,
        ]

    def test_one_shot_run(self) -> None:
        (self.root / "Talks").mkdir()

        with contextlib.redirect_stdout(io.StringIO()):
            code = cli.main(self._args())

        self.assertEqual(code, 0)
        self.assertEqual(
            (self.root / "feed_urls.txt").read_text(encoding="utf-8"),
            "https://host/s/Talks/feed.xml\n",
        )
        self.assertIn("Talks", (self.log_dir / "foldercast.log").read_text(encoding="utf-8"))

    def test_missing_configuration_exits_with_usage_error(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()) as stderr:
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--root", str(self.root)])

        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("ROOT_SHARE_URL", stderr.getvalue())

    def test_missing_root_directory_fails_the_pass(self) -> None:
        self.root.rmdir()

        with contextlib.redirect_stdout(io.StringIO()):
            code = cli.main(self._args())

        self.assertEqual(code, 1)

    def test_flags_reach_the_config(self) -> None:
        with mock.patch("foldercast.cli.generate_all", return_value=[]) as generate_all:
            with contextlib.redirect_stdout(io.StringIO()):
                code = cli.main(
                    self._args("--refresh", "--normalize-names", "--no-url-encoding")
                )

        self.assertEqual(code, 0)
        config = generate_all.call_args.args[0]
        self.assertTrue(config.normalize_names)
        self.assertFalse(config.encode_urls)
        self.assertTrue(generate_all.call_args.kwargs["refresh"])

    def test_watch_mode(self) -> None:
        with mock.patch("foldercast.watcher.watch", return_value=0) as watch:
            with contextlib.redirect_stdout(io.StringIO()):
                code = cli.main(self._args("--watch", "--interval-hours", "0.5"))

        self.assertEqual(code, 0)
        config = watch.call_args.args[0]
        self.assertEqual(config.interval_hours, 0.5)


if __name__ == "__main__":
    unittest.main()
