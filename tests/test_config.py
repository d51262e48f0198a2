import os
import tempfile
import unittest
from unittest.mock import patch

from runcoach.config import ROOT_DIR, get_api_key, load_config, storage_path
from runcoach.errors import ConfigError


class LoadConfigTests(unittest.TestCase):
    def _write(self, tmpdir, text):
        path = os.path.join(tmpdir, "config.yaml")
        with open(path, "w") as f:
            f.write(text)
        return path

    def test_values_are_merged_over_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "claude:\n  model: claude-test\nplanner:\n  goal: Marathon\n")

            config = load_config(path)

        self.assertEqual(config["claude"]["model"], "claude-test")
        self.assertEqual(config["claude"]["max_tokens"], 2000)
        self.assertEqual(config["planner"]["goal"], "Marathon")
        self.assertEqual(config["planner"]["long_run_day"], "Sunday")
        self.assertEqual(config["storage"]["path"], "data/runcoach.db")

    def test_repo_config_loads(self):
        config = load_config()
        self.assertEqual(config["claude"]["api_key_env"], "ANTHROPIC_API_KEY")

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_config("/nonexistent/config.yaml")

    def test_storage_path_is_anchored_at_repo_root(self):
        self.assertEqual(
            storage_path({"storage": {"path": "data/runcoach.db"}}),
            os.path.join(ROOT_DIR, "data", "runcoach.db"),
        )
        self.assertEqual(storage_path({"storage": {"path": "/tmp/plans.db"}}), "/tmp/plans.db")

    def test_bad_yaml_and_non_mapping(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(ConfigError):
                load_config(self._write(tmpdir, "claude: [unclosed\n"))
            with self.assertRaises(ConfigError):
                load_config(self._write(tmpdir, "- just\n- a list\n"))


class ApiKeyTests(unittest.TestCase):
    CONFIG = {"claude": {"api_key_env": "RUNCOACH_TEST_KEY"}}

    @patch("runcoach.config.load_dotenv")
    def test_reads_named_environment_variable(self, _load_dotenv):
        with patch.dict(os.environ, {"RUNCOACH_TEST_KEY": "sk-test"}):
            self.assertEqual(get_api_key(self.CONFIG), "sk-test")

    @patch("runcoach.config.load_dotenv")
    def test_missing_key_raises(self, _load_dotenv):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigError):
                get_api_key(self.CONFIG)


if __name__ == "__main__":
    unittest.main()
