"""
Unit tests for import error grouping and missing apartment extraction
"""

from services.enums import ImportErrorCategory
from services.import_errors import categorize_error, extract_missing_apartments, group_errors

MISSING_APARTMENT = "Failed to add resident: ALICE - Apartment 999 does not exist in Block A"
MISSING_BLOCK = 'Failed to add resident: Zed - Block "Z" does not exist'
DB_CONFLICT = "Location already occupied: Block B, Apartment 5 occupied by Carol"
ROW_CONFLICT = "Failed to add resident: Dave at Block B, Apartment 5 - Location already occupied by Carol"
BATCH_CONFLICT = 'Conflict in import: Both "Alice" and "Bob" are being assigned to Block A, Apartment 101'
PARSE_ERROR = "Invalid data format: Alice,555"


class TestCategorizeError:

    def test_categories(self):
        assert categorize_error(MISSING_APARTMENT) == ImportErrorCategory.MISSING_APARTMENTS
        assert categorize_error(MISSING_BLOCK) == ImportErrorCategory.MISSING_BLOCKS
        assert categorize_error(DB_CONFLICT) == ImportErrorCategory.LOCATION_CONFLICTS
        assert categorize_error(ROW_CONFLICT) == ImportErrorCategory.LOCATION_CONFLICTS
        assert categorize_error(BATCH_CONFLICT) == ImportErrorCategory.BATCH_CONFLICTS
        assert categorize_error(PARSE_ERROR) == ImportErrorCategory.OTHER


class TestGroupErrors:

    def test_every_category_present(self):
        grouped = group_errors([])

        assert set(grouped) == {category.value for category in ImportErrorCategory}
        assert all(errors == [] for errors in grouped.values())

    def test_errors_bucketed_in_order(self):
        grouped = group_errors([DB_CONFLICT, MISSING_APARTMENT, ROW_CONFLICT, PARSE_ERROR])

        assert grouped[ImportErrorCategory.LOCATION_CONFLICTS.value] == [DB_CONFLICT, ROW_CONFLICT]
        assert grouped[ImportErrorCategory.MISSING_APARTMENTS.value] == [MISSING_APARTMENT]
        assert grouped[ImportErrorCategory.OTHER.value] == [PARSE_ERROR]


class TestExtractMissingApartments:

    def test_numbers_grouped_by_block_without_duplicates(self):
        errors = [
            MISSING_APARTMENT,
            "Failed to add resident: BOB - Apartment 12 does not exist in Block A",
            "Failed to add resident: CAROL - Apartment 999 does not exist in Block A",
            "Failed to add resident: DAVE - Apartment 3 does not exist in Block Block B2",
            MISSING_BLOCK,
        ]

        missing = extract_missing_apartments(errors)

        assert missing == {'A': ['999', '12'], 'Block B2': ['3']}

    def test_no_matches(self):
        assert extract_missing_apartments([DB_CONFLICT, PARSE_ERROR]) == {}
