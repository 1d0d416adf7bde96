"""Tests for the command-line entry points."""

import json

import pytest

from loanscope.cli import cli_explore, cli_report


@pytest.fixture
def loans_csv(loans, tmp_path):
    path = tmp_path / "loans.csv"
    loans.to_csv(path, index=False)
    return path


def test_parse_delete():
    assert cli_explore.parse_delete("5") == 5.0
    assert cli_explore.parse_delete("5:10") == [5.0, 10.0]
    assert cli_explore.parse_delete("C") == "C"


def test_explore_prints_results(loans_csv, tmp_path, capsys):
    code = cli_explore.main([
        "--data", str(loans_csv), "--feature", "int_rate", "--buckets", "4",
        "--delete", "30:40", "--output", str(tmp_path / "plots"),
    ])

    out = capsys.readouterr().out
    assert code == 0
    assert "mannwhitneyu" in out
    assert "chi2_contingency" in out
    assert (tmp_path / "plots" / "int_rate_b_count.png").exists()


def test_explore_bucket_json(loans_csv, capsys):
    buckets = json.dumps({"[min,15)": ["min", 15], "15+=": [15, "max"]})
    code = cli_explore.main([
        "--data", str(loans_csv), "--feature", "int_rate", "--buckets-json", buckets,
    ])

    out = capsys.readouterr().out
    assert code == 0
    assert "bucket: chi2_contingency" in out


def test_explore_unknown_feature(loans_csv, capsys):
    code = cli_explore.main(["--data", str(loans_csv), "--feature", "nope"])

    assert code == 1
    assert "error" in capsys.readouterr().err


def test_report_writes_pdf(loans_csv, tmp_path):
    out_dir = tmp_path / "out"
    code = cli_report.main([
        "--data", str(loans_csv), "--features", "int_rate", "grade", "term", "missing",
        "--output", str(out_dir), "--buckets", "3",
    ])

    assert code == 0
    assert (out_dir / "loanscope_report.pdf").exists()
    assert (out_dir / "int_rate_b_rate.png").exists()
    assert not (out_dir / "term_b_rate.png").exists()
