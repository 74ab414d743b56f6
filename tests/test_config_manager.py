import pytest

from datautils.core.exceptions import ConfigurationError
from datautils.utils.config_manager import ConfigManager


@pytest.fixture
def manager(tmp_path):
    path = tmp_path / "jobs.ini"
    path.write_text(
        "[job:a]\n"
        "query = SELECT * FROM t WHERE x = %s\n"
        "indexes = 2, 0\n"
        "flag = Yes\n"
        "bad = 1, x\n",
        encoding="utf-8",
    )
    return ConfigManager(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path / "absent.ini")


def test_percent_signs_are_kept(manager):
    assert manager.get("job:a", "query") == "SELECT * FROM t WHERE x = %s"


def test_fallback_and_missing(manager):
    assert manager.get("job:a", "missing", fallback="") == ""
    with pytest.raises(ConfigurationError):
        manager.get("job:a", "missing")
    with pytest.raises(ConfigurationError):
        manager.get_section("job:b")


def test_typed_values(manager):
    assert manager.get_int_list("job:a", "indexes") == [2, 0]
    assert manager.get_int_list("job:a", "missing") == []
    assert manager.get_bool("job:a", "flag") is True
    assert manager.get_bool("job:a", "missing", fallback=True) is True
    with pytest.raises(ConfigurationError):
        manager.get_int_list("job:a", "bad")


def test_sections_by_prefix(manager):
    assert manager.sections("job:") == ["job:a"]
    assert manager.get_section("job:a")["flag"] == "Yes"


def test_malformed_file(tmp_path):
    path = tmp_path / "jobs.ini"
    path.write_text("query = outside any section\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as exc_info:
        ConfigManager(path)

    assert exc_info.value.original_error is not None


def test_missing_section_behaves_like_missing_option(manager):
    assert manager.get_list("job:b", "indexes") == []
    assert manager.get_bool("job:b", "flag") is False
    with pytest.raises(ConfigurationError):
        manager.get("job:b", "query")


def test_bad_number_is_named_in_error(manager):
    with pytest.raises(ConfigurationError) as exc_info:
        manager.get_int_list("job:a", "bad")

    assert "'x'" in str(exc_info.value)
