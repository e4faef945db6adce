import os
from unittest import TestCase, mock

from feedlens.main import config


class TestConfigHelpers(TestCase):
    def test_numbers(self) -> None:
        with mock.patch.dict(os.environ, {"FL_INT": "7", "FL_FLOAT": "2.5", "FL_BLANK": " "}):
            self.assertEqual(config._int_env("FL_INT", 1), 7)
            self.assertEqual(config._float_env("FL_FLOAT", 1.0), 2.5)
            self.assertEqual(config._int_env("FL_BLANK", 3), 3)
            self.assertEqual(config._int_env("FL_UNSET", 4), 4)

    def test_bad_number_names_the_variable(self) -> None:
        with mock.patch.dict(os.environ, {"FL_INT": "five"}):
            with self.assertRaisesRegex(ValueError, "FL_INT"):
                config._int_env("FL_INT", 1)

    def test_list(self) -> None:
        with mock.patch.dict(os.environ, {"FL_LIST": "https://a.test/rss, ,https://b.test/atom"}):
            self.assertEqual(
                config._list_env("FL_LIST", []), ["https://a.test/rss", "https://b.test/atom"]
            )
        self.assertEqual(config._list_env("FL_UNSET_LIST", ["x"]), ["x"])
