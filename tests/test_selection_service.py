import re

import pytest

from core.models import STATUS_REVIEWED
from core.services.selection_service import (
    FIELD_CATEGORY,
    FIELD_FILE_NAME,
    FIELD_SUMMARY,
    FIELD_TAGS,
    RegexSelectionService,
    field_text,
)


class Accessor:
    def __init__(self, records):
        self.records = records
        self.selected = set()

    def iter_records(self):
        return list(self.records)

    def select(self, filenames):
        new = [f for f in filenames if f not in self.selected]
        self.selected.update(new)
        return len(new)

    def unselect(self, filenames):
        gone = [f for f in filenames if f in self.selected]
        self.selected.difference_update(gone)
        return len(gone)


def test_field_text(make_record):
    record = make_record(
        "A.JPG", STATUS_REVIEWED, category="comida", tags="plato, mesa", summary="Buena luz"
    )

    assert field_text(record, FIELD_FILE_NAME) == "A.JPG"
    assert field_text(record, FIELD_CATEGORY) == "comida"
    assert field_text(record, FIELD_TAGS) == "plato, mesa"
    assert field_text(record, FIELD_SUMMARY) == "Buena luz"
    with pytest.raises(ValueError):
        field_text(record, "Score")


def test_select_then_unselect_by_tag(reviewed_records):
    acc = Accessor(reviewed_records)
    service = RegexSelectionService(acc)

    assert service.apply(FIELD_TAGS, r"nieve|playa", True) == 2
    assert acc.selected == {"R1.JPG", "R3.JPG"}
    assert service.apply(FIELD_FILE_NAME, r"^R1", False) == 1
    assert acc.selected == {"R3.JPG"}


def test_no_match_changes_nothing(reviewed_records):
    acc = Accessor(reviewed_records)

    assert RegexSelectionService(acc).apply(FIELD_CATEGORY, "^mascotas$", True) == 0
    assert acc.selected == set()


def test_invalid_pattern_raises(reviewed_records):
    with pytest.raises(re.error):
        RegexSelectionService(Accessor(reviewed_records)).apply(FIELD_FILE_NAME, "[", True)
