"""Tests for the koekoi CLI."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from koekoi.cli import parse_args, main


class TestParseDrill:
    def test_drill_defaults(self):
        args = parse_args(["drill", "phrases.json", "take1.wav", "take2.wav"])
        assert args.command == "drill"
        assert args.phrases == Path("phrases.json")
        assert args.recordings == ["take1.wav", "take2.wav"]
        assert args.language == "Japanese"
        assert args.whisper_model == "base"
        assert args.shuffle is False
        assert args.settle_delay == 50
        assert args.reset_delay == 1500
        assert args.output is None
        assert args.no_cache is False

    def test_drill_options(self):
        args = parse_args([
            "drill", "phrases.json", "take.wav",
            "--language", "ko-KR",
            "--whisper-model", "small",
            "--shuffle", "--seed", "7",
            "--reset-delay", "500",
            "--output", "/tmp/report.json",
            "--no-cache",
        ])
        assert args.language == "ko-KR"
        assert args.whisper_model == "small"
        assert args.shuffle is True
        assert args.seed == 7
        assert args.reset_delay == 500
        assert args.output == Path("/tmp/report.json")
        assert args.no_cache is True

    def test_requires_recording(self):
        with pytest.raises(SystemExit):
            parse_args(["drill", "phrases.json"])

    def test_no_command(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestRunDrill:
    def test_calls_run_drill(self, tmp_path, capsys):
        phrases = tmp_path / "phrases.json"
        phrases.write_text("[]")
        take = tmp_path / "take.wav"
        take.touch()

        report = MagicMock()
        report.outcomes = []
        report.to_dict.return_value = {"correct": 0, "incorrect": 0, "errors": 0}

        with patch("koekoi.drill.run_drill", return_value=report) as mock_run:
            main(["drill", str(phrases), str(take), "--language", "Spanish", "--seed", "3"])

        kwargs = mock_run.call_args[1]
        assert kwargs["language"] == "Spanish"
        assert kwargs["recordings"] == [take]
        assert kwargs["seed"] == 3
        assert kwargs["use_cache"] is True
        assert "Correct: 0" in capsys.readouterr().out

    def test_missing_recording(self, tmp_path, capsys):
        phrases = tmp_path / "phrases.json"
        phrases.write_text("[]")
        with pytest.raises(SystemExit) as exc:
            main(["drill", str(phrases), str(tmp_path / "missing.wav")])
        assert exc.value.code == 1
        assert "file not found" in capsys.readouterr().err

    def test_bad_phrase_file(self, tmp_path, capsys):
        phrases = tmp_path / "phrases.json"
        phrases.write_text("[]")
        take = tmp_path / "take.wav"
        take.touch()
        with patch("koekoi.drill.run_drill", side_effect=ValueError("no phrases")):
            with pytest.raises(SystemExit):
                main(["drill", str(phrases), str(take)])
        assert "no phrases" in capsys.readouterr().err


def test_normalize_command(capsys):
    main(["normalize", "--language", "es", "Buenos Días"])
    assert capsys.readouterr().out.strip() == "buenosdías"


def test_check_command(capsys):
    main(["check", "--language", "vi", "Xin chào", "xin"])
    out = capsys.readouterr().out
    assert "xinchào" in out
    assert "prefix" in out
