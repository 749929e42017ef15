"""Tests for the command-line launcher."""

import argparse
import json

import pytest

import run_parser


def _json_output(out: str) -> dict:
    # log lines share stdout; the JSON document is printed last
    return json.loads(out[out.index("{\n"):])


class TestArguments:
    """Tests for MVP flag parsing."""

    def test_ratings_build_mvp_data(self):
        args = run_parser.build_arg_parser().parse_args(
            [
                "cv.txt",
                "--title", "Product Designer",
                "--availability", "Available",
                "--experience-years", "6",
                "--skill-rating", "Figma=5",
                "--skill-rating", "Sketch=4",
                "--language-rating", "English=5",
            ]
        )
        mvp = run_parser.build_mvp_data(args)
        assert mvp.title == "Product Designer"
        assert mvp.availability == "Available"
        assert mvp.total_experience_years == 6
        assert mvp.skills_proficiency == {"Figma": 5.0, "Sketch": 4.0}
        assert mvp.languages_proficiency == {"English": 5.0}

    def test_defaults_are_empty(self):
        mvp = run_parser.build_mvp_data(run_parser.build_arg_parser().parse_args(["cv.txt"]))
        assert mvp.title == ""
        assert mvp.skills_proficiency == {}

    @pytest.mark.parametrize("value", ["Figma", "=3", "Figma=high"])
    def test_bad_rating_rejected(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            run_parser._rating(value)

    def test_unknown_availability_rejected(self):
        with pytest.raises(SystemExit):
            run_parser.build_arg_parser().parse_args(["cv.txt", "--availability", "Sometimes"])


class TestMain:
    """Tests for the end-to-end command."""

    def test_validate_uses_declared_fields(self, tmp_path, capsys, sample_cv_text):
        cv_file = tmp_path / "cv.txt"
        cv_file.write_text(sample_cv_text, encoding="utf-8")

        exit_code = run_parser.main(
            [str(cv_file), "--validate", "--title", "Product Designer", "--availability", "Busy"]
        )
        output = _json_output(capsys.readouterr().out)

        assert exit_code == 0
        assert output["result"]["success"] is True
        missing = output["validation"]["missingFields"]
        assert "title" not in missing
        assert "availability" not in missing

    def test_without_declared_fields_they_are_missing(self, tmp_path, capsys, sample_cv_text):
        cv_file = tmp_path / "cv.txt"
        cv_file.write_text(sample_cv_text, encoding="utf-8")

        run_parser.main([str(cv_file), "--validate"])
        missing = _json_output(capsys.readouterr().out)["validation"]["missingFields"]
        assert "title" in missing
        assert "availability" in missing
