import pytest

from samples import SOURCE_CSV, TARGET_CSV


@pytest.fixture
def target_path(tmp_path):
    p = tmp_path / "KH-Print_translations.csv"
    p.write_text(TARGET_CSV, encoding="utf-8")
    return p


@pytest.fixture
def source_path(tmp_path):
    p = tmp_path / "finnish-translations.csv"
    p.write_text(SOURCE_CSV, encoding="utf-8")
    return p
