"""Tests for the command-line allowance calculator."""

import json

import pytest

from scripts.expense_cli import main


class TestCalculateCommand:

    def test_prints_calculation(self, capsys):
        exit_code = main([
            "calculate", "--role", "mr", "--distance", "45",
            "--night-stay", "--hotel-bill", "600",
        ])
        out = json.loads(capsys.readouterr().out)

        assert exit_code == 0
        assert out["calculated_da"] == "100.00"
        assert out["calculated_ta"] == "112.50"
        assert out["total_expense"] == "712.50"
        assert out["breakdown"]["hotel_amount"] == "500"
        assert out["is_outstation"] is True

    def test_manager_joint_work(self, capsys):
        main(["calculate", "--role", "manager", "--distance", "5", "--joint-work"])
        out = json.loads(capsys.readouterr().out)
        assert out["breakdown"]["da_type"] == "Manager DA (Joint with MR)"

    def test_invalid_input_warns_and_fails(self, capsys):
        exit_code = main(["calculate", "--distance", "-3"])
        captured = capsys.readouterr()
        assert exit_code == 1
        assert "Distance cannot be negative" in captured.err
        assert json.loads(captured.out)["calculated_ta"] == "0"

    def test_custom_settings_file(self, tmp_path, capsys):
        path = tmp_path / "rates.yaml"
        path.write_text("expense_settings:\n  mr_da_local: 175\n")
        main(["--settings", str(path), "calculate", "--distance", "10"])
        out = json.loads(capsys.readouterr().out)
        assert out["calculated_da"] == "175.00"

    def test_unknown_role_rejected(self):
        with pytest.raises(SystemExit):
            main(["calculate", "--role", "driver", "--distance", "10"])


class TestWindowCommand:

    def test_prints_window_status(self, capsys):
        assert main(["window"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert set(out) == {"allowed", "message", "time_remaining"}
