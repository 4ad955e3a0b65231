"""Tests for the admin-facing settings provider."""

from decimal import Decimal
from pathlib import Path

import pytest

from fieldforce_kernel.exceptions import InvalidSettingsError
from fieldforce_modules.expense.models import AppSettings
from fieldforce_modules.expense.settings import SettingsProvider


class TestSettingsProvider:

    def test_defaults(self):
        assert SettingsProvider().get() == AppSettings()

    def test_update_returns_new_snapshot(self, settings_provider):
        before = settings_provider.get()
        after = settings_provider.update(ta_per_km="3", manager_da_joint=600)
        assert after.ta_per_km == Decimal("3")
        assert after.manager_da_joint == Decimal("600")
        assert settings_provider.get() is after
        # Snapshots taken earlier are unaffected
        assert before.ta_per_km == Decimal("2.5")

    def test_update_rejects_unknown_field(self, settings_provider):
        with pytest.raises(InvalidSettingsError):
            settings_provider.update(ta_per_mile=3)
        assert settings_provider.get() == AppSettings()

    def test_update_rejects_bad_hour(self, settings_provider):
        with pytest.raises(InvalidSettingsError):
            settings_provider.update(expense_entry_start_hour=25)

    @pytest.mark.parametrize("value", ["Infinity", "NaN", float("inf")])
    def test_update_rejects_non_finite_rate(self, settings_provider, value):
        with pytest.raises(InvalidSettingsError) as exc_info:
            settings_provider.update(ta_per_km=value, outstation_ta_cap="500")
        assert exc_info.value.field == "ta_per_km"
        assert settings_provider.get() == AppSettings()

    def test_reset_restores_defaults(self, settings_provider):
        settings_provider.update(mr_da_local=150)
        assert settings_provider.reset() == AppSettings()

    def test_update_logged(self, settings_provider, captured_logs):
        settings_provider.update(mr_hotel_limit=550)
        (record,) = [r for r in captured_logs() if r["message"] == "app_settings_updated"]
        assert record["fields"] == ["mr_hotel_limit"]

    def test_from_yaml_resets_to_file_values(self, tmp_path: Path):
        path = tmp_path / "settings.yaml"
        path.write_text("expense_settings:\n  mr_da_local: 180\n")
        provider = SettingsProvider.from_yaml(path)
        assert provider.get().mr_da_local == Decimal("180")

        provider.update(mr_da_local=90)
        assert provider.reset().mr_da_local == Decimal("180")
