import unittest
from unittest.mock import patch

from blog_backend.__main__ import main


class ServeCommandTests(unittest.TestCase):
    @patch("blog_backend.__main__.uvicorn.run")
    def test_runs_app_with_defaults(self, run):
        self.assertEqual(main([]), 0)

        run.assert_called_once()
        args, kwargs = run.call_args
        self.assertEqual(args, ("blog_backend.app:app",))
        self.assertEqual(kwargs["host"], "127.0.0.1")
        self.assertEqual(kwargs["port"], 8000)
        self.assertFalse(kwargs["reload"])

    @patch("blog_backend.__main__.uvicorn.run")
    def test_cli_flags_override_defaults(self, run):
        main(["--host", "0.0.0.0", "--port", "9000", "--reload", "--log-level", "debug"])

        kwargs = run.call_args.kwargs
        self.assertEqual(kwargs["host"], "0.0.0.0")
        self.assertEqual(kwargs["port"], 9000)
        self.assertTrue(kwargs["reload"])
        self.assertEqual(kwargs["log_level"], "debug")


if __name__ == "__main__":
    unittest.main()
