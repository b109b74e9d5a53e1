"""
Tests for the interactive config builder, driven by scripted answers.
"""

import json
import os
import tempfile
import unittest
from datetime import date
from pathlib import Path

from schedulemaker.builder import default_config_path, generate_config


def scripted(answers: list[str]):
    it = iter(answers)

    def ask(_msg: str) -> str:
        return next(it)

    return ask


class TestBuilder(unittest.TestCase):
    def test_default_path(self) -> None:
        self.assertEqual(default_config_path("fall"), Path("fall-config.json"))
        self.assertEqual(default_config_path(None), Path("config.json"))

    def test_generate_and_save(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            target = Path(d) / "my"
            answers = [
                "fall",
                "not a date",  # re-asked
                "08/26/2024",
                "2024-12-13",
                "",  # no course yet -> re-asked
                "csci 243",
                "MATH-251",
                "",
                "json",
                "",
                str(target),
            ]
            config, path = generate_config(ask=scripted(answers), confirm=lambda _: False)

            self.assertEqual(config.name, "fall")
            self.assertEqual(config.start_date, date(2024, 8, 26))
            self.assertEqual(config.courses, ["CSCI-243", "MATH-251"])
            self.assertEqual(config.format, "json")
            self.assertIsNone(config.output)

            self.assertEqual(path, Path(d) / "my.json")
            data = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(data["courses"], ["CSCI-243", "MATH-251"])
            self.assertNotIn("rules", data)

    def test_existing_file_asks_for_new_path(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            taken = Path(d) / "taken.json"
            taken.write_text("{}", encoding="utf-8")
            answers = ["", "2024-08-26", "2024-12-13", "A-1", "", "", "", str(taken), str(Path(d) / "free.json")]
            _, path = generate_config(ask=scripted(answers), confirm=lambda _: False)

            self.assertEqual(path, Path(d) / "free.json")
            self.assertEqual(taken.read_text(encoding="utf-8"), "{}")

    def test_default_save_location(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            cwd = os.getcwd()
            os.chdir(d)
            try:
                answers = ["spring", "2025-01-13", "2025-05-02", "A-1", "", "", "", ""]
                _, path = generate_config(ask=scripted(answers), confirm=lambda _: True)
                self.assertEqual(path, Path("spring-config.json"))
                self.assertTrue((Path(d) / "spring-config.json").exists())
            finally:
                os.chdir(cwd)


if __name__ == "__main__":
    unittest.main()
