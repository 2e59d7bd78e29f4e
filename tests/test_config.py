"""Tests for config module."""

from __future__ import annotations

from datetime import date

import pytest

from practice_tracker.config import Config


class TestConfigConstants:
    """Test suite for Config static constants.

    Categories:
    1. Storage - directory and file names (2 tests)
    2. Analytics - range tokens, downsampling, goal (3 tests)
    3. Enumerations - session sources, milestone types (1 test)
    """

    def test_storage_dir_value(self) -> None:
        """Verifies STORAGE_DIR has the expected default value.

        Business context:
        Data files live in a hidden project-local directory so the tracker
        can run from any folder without polluting it.

        Assertion Strategy:
        Validates exact string match.
        """
        assert Config.STORAGE_DIR == ".practice_tracker"

    def test_data_file_names(self) -> None:
        assert Config.SESSIONS_FILE == "sessions.json"
        assert Config.MILESTONES_FILE == "milestones.json"
        assert Config.TIMER_FILE == "timer.json"

    def test_range_tokens_shortest_first(self) -> None:
        """Verifies chart windows are listed shortest first.

        Business context:
        The range selector renders buttons in this order.
        """
        assert Config.RANGE_TOKENS == ("1W", "1M", "6M", "1Y", "ALL")
        assert Config.LONG_RANGES <= set(Config.RANGE_TOKENS)
        assert "1W" not in Config.LONG_RANGES

    def test_downsample_target(self) -> None:
        assert Config.DOWNSAMPLE_TARGET == 100

    def test_goal_and_milestone_steps(self) -> None:
        assert Config.GOAL_HOURS == 10_000
        assert Config.MILESTONE_STEPS == (1000, 100)

    def test_enumerations_are_frozensets(self) -> None:
        assert isinstance(Config.SESSION_SOURCES, frozenset)
        assert {"csv_import", "manual", "timer"} <= Config.SESSION_SOURCES
        assert Config.MILESTONE_TYPES == frozenset({"interval", "custom"})


class TestConfigEnvironmentSettings:
    """Test suite for environment-based settings and test overrides.

    Categories:
    1. Storage Directory - default, env var, override (3 tests)
    2. Timezone - unset, valid, invalid (3 tests)
    3. Visual Start Date - unset, env var, invalid, override (4 tests)
    4. Reset (1 test)
    """

    def test_storage_dir_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PRACTICE_STORAGE_DIR", raising=False)
        assert Config.get_storage_dir() == ".practice_tracker"

    def test_storage_dir_from_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRACTICE_STORAGE_DIR", "/data/practice")
        assert Config.get_storage_dir() == "/data/practice"

    def test_storage_dir_override_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verifies the test override takes priority over the environment.

        Arrangement:
        Env var and override both set.

        Assertion Strategy:
        Override value is returned.
        """
        monkeypatch.setenv("PRACTICE_STORAGE_DIR", "/data/practice")
        Config.set_test_overrides(storage_dir="/tmp/override")
        assert Config.get_storage_dir() == "/tmp/override"

    def test_timezone_unset_is_local(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PRACTICE_TIMEZONE", raising=False)
        assert Config.get_timezone() is None

    def test_timezone_from_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRACTICE_TIMEZONE", "Europe/Berlin")
        tz = Config.get_timezone()
        assert tz is not None
        assert tz.key == "Europe/Berlin"

    def test_unknown_timezone_falls_back(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Verifies an unknown zone name is logged and ignored.

        Business context:
        A typo in the environment must not stop the dashboard from
        starting; day boundaries fall back to system local time.

        Assertion Strategy:
        None returned and a warning naming the zone is logged.
        """
        monkeypatch.setenv("PRACTICE_TIMEZONE", "Mars/Olympus_Mons")
        with caplog.at_level("WARNING", logger="practice_tracker.config"):
            assert Config.get_timezone() is None
        assert "Mars/Olympus_Mons" in caplog.text

    def test_visual_start_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PRACTICE_VISUAL_START_DATE", raising=False)
        assert Config.get_visual_start_date() is None

    def test_visual_start_from_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRACTICE_VISUAL_START_DATE", " 2024-03-01 ")
        assert Config.get_visual_start_date() == date(2024, 3, 1)

    def test_visual_start_invalid_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRACTICE_VISUAL_START_DATE", "March 2024")
        assert Config.get_visual_start_date() is None

    def test_visual_start_override_can_force_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verifies override_visual_start hides the env value even when None.

        Business context:
        Tests for unclamped charts must not depend on the developer's
        environment.
        """
        monkeypatch.setenv("PRACTICE_VISUAL_START_DATE", "2024-03-01")

        Config.set_test_overrides(override_visual_start=True)
        assert Config.get_visual_start_date() is None

        Config.set_test_overrides(visual_start_date=date(2023, 1, 1))
        assert Config.get_visual_start_date() == date(2023, 1, 1)

    def test_reset_test_overrides_clears_all(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PRACTICE_STORAGE_DIR", raising=False)
        monkeypatch.delenv("PRACTICE_TIMEZONE", raising=False)
        monkeypatch.delenv("PRACTICE_VISUAL_START_DATE", raising=False)
        Config.set_test_overrides(storage_dir="/x", timezone="UTC", visual_start_date=date(2024, 1, 1))

        Config.reset_test_overrides()

        assert Config.get_storage_dir() == ".practice_tracker"
        assert Config.get_timezone() is None
        assert Config.get_visual_start_date() is None


class TestNormalizeRange:
    """Tests for range token normalization."""

    @pytest.mark.parametrize(
        ("token", "expected"),
        [("1w", "1W"), (" 1M ", "1M"), ("6m", "6M"), ("1y", "1Y"), ("all", "ALL"), ("max", "ALL")],
    )
    def test_known_tokens(self, token: str, expected: str) -> None:
        assert Config.normalize_range(token) == expected

    @pytest.mark.parametrize("token", ["", "1D", "2W", "forever"])
    def test_unknown_tokens(self, token: str) -> None:
        assert Config.normalize_range(token) is None
