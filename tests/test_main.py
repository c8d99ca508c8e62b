from pathlib import Path

import pytest

from bank_marketing import main as cli


@pytest.mark.parametrize("command", ["download", "explore", "compare", "final", "run"])
def test_parser_accepts_every_command(command):
    args = cli.build_parser().parse_args([command, "--seed", "3"])
    assert args.command == command
    assert args.seed == 3
    assert args.models is None


def test_overrides_reach_the_config(tmp_path):
    args = cli.build_parser().parse_args([
        "compare",
        "--output-dir", str(tmp_path),
        "--models", "ctree", "lda",
        "--final-model", "best",
    ])

    config = cli._load_pipeline_config(args)

    assert config.paths.output_dir == Path(tmp_path)
    assert config.models.enabled == ["ctree", "lda"]
    assert config.models.final_model == "best"
    assert config.split.seed == 1


def test_no_command_prints_help(capsys):
    cli.main([])
    assert "usage" in capsys.readouterr().out.lower()


def test_compare_command_end_to_end(monkeypatch, bank_df, tmp_path, capsys):
    monkeypatch.setattr(cli, "load_bank_data", lambda config, force_download=False: bank_df)

    cli.main(["compare", "--output-dir", str(tmp_path), "--models", "naive_bayes", "lssvm"])

    out = capsys.readouterr().out
    assert "MODEL COMPARISON" in out
    assert "Naive Bayes Model" in out
    assert (tmp_path / "model_comparison.csv").exists()


def test_final_command_end_to_end(monkeypatch, bank_df, tmp_path, capsys):
    monkeypatch.setattr(cli, "load_bank_data", lambda config, force_download=False: bank_df)

    cli.main(["final", "--output-dir", str(tmp_path), "--final-model", "naive_bayes"])

    out = capsys.readouterr().out
    assert "FINAL HOLDOUT EVALUATION" in out
    assert (tmp_path / "final_model.pkl").exists()
