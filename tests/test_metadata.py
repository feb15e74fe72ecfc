import logging

import pytest

from qbloader.services.metadata import MetadataStyle, ParsedMetadata, parse_metadata


def test_default_style():
    parsed = parse_metadata("Jane Doe, Biology - Cell Biology", MetadataStyle.DEFAULT)
    assert parsed == ParsedMetadata(
        category="Science", subcategory="Biology", subsubcategory="Cell Biology", author="Jane Doe"
    )


def test_default_style_with_category_first_path():
    parsed = parse_metadata("Jane Doe, Science - Biology", MetadataStyle.DEFAULT)
    assert (parsed.category, parsed.subcategory, parsed.author) == ("Science", "Biology", "Jane Doe")


def test_default_style_category_before_author():
    parsed = parse_metadata("Biology, Jane Doe", MetadataStyle.DEFAULT, author_first=False)
    assert (parsed.author, parsed.category, parsed.subcategory) == ("Jane Doe", "Science", "Biology")


def test_no_author_style():
    parsed = parse_metadata("Mythology", MetadataStyle.NO_AUTHOR)
    assert (parsed.category, parsed.subcategory) == ("RMPSS", "Mythology")


def test_subcategory_equal_to_category_is_emptied():
    parsed = parse_metadata("Geography", MetadataStyle.NO_AUTHOR)
    assert (parsed.category, parsed.subcategory) == ("Geography", "")


def test_author_and_category_style():
    parsed = parse_metadata("John Smith-European History", MetadataStyle.AUTHOR_AND_CATEGORY)
    assert (parsed.author, parsed.category, parsed.subcategory) == ("John Smith", "History", "European")


def test_nsc_style():
    parsed = parse_metadata("Alice, Science - Physics&gt; Editor: Bob", MetadataStyle.NSC)
    assert parsed == ParsedMetadata(category="Science", subcategory="Physics", author="Alice", editor="Bob")


def test_nasat_style():
    parsed = parse_metadata("Alice , Science - Biology - Genetics", MetadataStyle.NASAT)
    assert parsed == ParsedMetadata(
        category="Science", subcategory="Biology", subsubcategory="Genetics", author="Alice"
    )


def test_qb_reader_style():
    parsed = parse_metadata("Science - Biology", MetadataStyle.QB_READER)
    assert (parsed.category, parsed.subcategory, parsed.subsubcategory) == ("Science", "Biology", "")


def test_none_style_and_empty_text():
    assert parse_metadata("Jane Doe, Biology", MetadataStyle.NONE) == ParsedMetadata()
    assert parse_metadata(None, MetadataStyle.DEFAULT) == ParsedMetadata()


def test_unmatched_line_leaves_fields_empty():
    parsed = parse_metadata("no separator here", MetadataStyle.NSC)
    assert parsed == ParsedMetadata()


def test_unknown_style_yields_empty_fields(caplog):
    with caplog.at_level(logging.WARNING):
        assert parse_metadata("Jane Doe, Biology", None) == ParsedMetadata()
    assert caplog.records == []


def test_custom_subcategory_map():
    parsed = parse_metadata("Jane Doe, Opera", MetadataStyle.DEFAULT, subcategory_map={"Opera": "Fine Arts"})
    assert parsed.category == "Fine Arts"


@pytest.mark.parametrize(
    "value, expected",
    [
        (6, MetadataStyle.QB_READER),
        ("7", MetadataStyle.NONE),
        ("qbReader", MetadataStyle.QB_READER),
        ("authorAndCategory", MetadataStyle.AUTHOR_AND_CATEGORY),
        (99, None),
        ("mystery", None),
        (None, None),
    ],
)
def test_style_coercion(value, expected):
    assert MetadataStyle.coerce(value) is expected


def test_category_is_removed_from_subcategory():
    parsed = parse_metadata("Science - Science Biology", MetadataStyle.QB_READER)
    assert (parsed.category, parsed.subcategory) == ("Science", "Biology")
