"""
Unit tests for SKU service.

Tests generation format, truncation/padding, parsing and collision retries.
"""

import random
import re
from unittest.mock import MagicMock
import pytest

from config import settings
from models.sku import SkuComponents
from services.sku_service import SkuService, generate_sku, parse_sku
from exceptions import SKUGenerationError

SKU_PATTERN = re.compile(r"^[A-Z0-9]{3}-[A-Z0-9]{3}-[A-Z0-9]{2}-\d{3}$")


# ===================
# FIXTURES
# ===================

@pytest.fixture
def fixed_rng():
    """Random source whose suffix draws are scripted."""
    rng = MagicMock()
    rng.randint.return_value = 52
    return rng


@pytest.fixture
def mock_store():
    """Inventory store where no SKU exists yet."""
    store = MagicMock()
    store.sku_exists.return_value = False
    return store


# ===================
# GENERATE TESTS
# ===================

class TestGenerateSku:
    """Tests for generate_sku function."""

    def test_full_attributes(self, fixed_rng):
        """Type, color and size are truncated to their widths."""
        sku = generate_sku(SkuComponents(type="Shirt", color="Black", size="XL"), fixed_rng)

        assert sku == "SHI-BLA-XL-052"

    def test_short_attributes_padded_with_filler(self, fixed_rng):
        """Short or missing attributes are padded with X."""
        sku = generate_sku(SkuComponents(type="T", color="", size=None), fixed_rng)

        assert sku == "TXX-XXX-XX-052"

    def test_all_missing_attributes(self, fixed_rng):
        """No attributes at all still yields a well-formed SKU."""
        sku = generate_sku(SkuComponents(), fixed_rng)

        assert sku == "XXX-XXX-XX-052"

    def test_accents_and_punctuation_removed(self, fixed_rng):
        """Attributes are reduced to A-Z and 0-9 before truncation."""
        sku = generate_sku(SkuComponents(type="T-Shirt", color="Café", size="x l"), fixed_rng)

        assert sku == "TSH-CAF-XL-052"

    def test_suffix_zero_padded(self, fixed_rng):
        """Suffix is always three digits."""
        fixed_rng.randint.return_value = 7

        sku = generate_sku(SkuComponents(type="Cap", color="Blue", size="S"), fixed_rng)

        assert sku.endswith("-007")

    def test_suffix_range(self, fixed_rng):
        """Suffix is drawn from 1..999."""
        generate_sku(SkuComponents(type="Cap"), fixed_rng)

        fixed_rng.randint.assert_called_once_with(1, 999)

    def test_prefix_kept_verbatim(self, fixed_rng):
        """Prefix is prepended to the type segment."""
        sku = generate_sku(
            SkuComponents(type="Shirt", color="Black", size="XL", prefix="ST"),
            fixed_rng
        )

        assert sku == "STSHI-BLA-XL-052"

    def test_random_output_matches_grammar(self):
        """Any input, any draw: the SKU stays within the grammar."""
        rng = random.Random(1234)
        samples = [
            ("Shirt", "Black", "XL"),
            ("", "", ""),
            ("Ñandú", "Rojo/Azul", "10½"),
            ("a", "bb", "ccc"),
            ("123456", "   ", "-"),
        ]

        for type_, color, size in samples * 20:
            sku = generate_sku(SkuComponents(type=type_, color=color, size=size), rng)
            assert SKU_PATTERN.match(sku), sku

    def test_seeded_generation_is_reproducible(self):
        """Same seed, same SKU."""
        components = SkuComponents(type="Shirt", color="Black", size="XL")

        first = generate_sku(components, random.Random(99))
        second = generate_sku(components, random.Random(99))

        assert first == second


# ===================
# PARSE TESTS
# ===================

class TestParseSku:
    """Tests for parse_sku function."""

    def test_parse_full_sku(self):
        """Structured SKU splits into its codes."""
        parsed = parse_sku("SHI-BLA-XL-052")

        assert parsed.parsed is True
        assert parsed.type == "SHI"
        assert parsed.color == "BLA"
        assert parsed.size == "XL"
        assert parsed.suffix == "052"

    def test_parse_strips_filler(self):
        """Trailing filler is removed from each code."""
        parsed = parse_sku("TXX-XXX-XX-007")

        assert parsed.type == "T"
        assert parsed.color == ""
        assert parsed.size == ""
        assert parsed.suffix == "007"

    def test_parse_opaque_identifier(self):
        """Fewer than four segments is not a structured SKU."""
        parsed = parse_sku("LEGACY-001")

        assert parsed.parsed is False
        assert parsed.type is None
        assert parsed.suffix is None

    @pytest.mark.parametrize("value", [None, "", "ABC"])
    def test_parse_empty_values(self, value):
        """Empty and single-segment values parse to nothing."""
        assert parse_sku(value).parsed is False

    def test_parse_removes_known_prefix(self):
        """A known prefix is removed from the type code."""
        parsed = parse_sku("STSHI-BLA-XL-052", prefix="ST")

        assert parsed.type == "SHI"

    def test_parse_prefix_with_delimiter(self):
        """With more than four segments the last four are used."""
        parsed = parse_sku("ACME-SHI-BLA-XL-052")

        assert parsed.type == "SHI"
        assert parsed.suffix == "052"

    def test_parse_is_lossy_for_trailing_x(self, fixed_rng):
        """A code ending in X cannot be told apart from padding."""
        sku = generate_sku(SkuComponents(type="Box", color="Black", size="M"), fixed_rng)

        parsed = parse_sku(sku)

        assert sku == "BOX-BLA-MX-052"
        assert parsed.type == "BO"
        assert parsed.size == "M"

    def test_generated_codes_round_trip(self, fixed_rng):
        """Codes without trailing X survive generate then parse."""
        sku = generate_sku(SkuComponents(type="Hoodie", color="Red", size="L"), fixed_rng)

        parsed = parse_sku(sku)

        assert (parsed.type, parsed.color, parsed.size) == ("HOO", "RED", "L")


# ===================
# UNIQUE GENERATION TESTS
# ===================

class TestSkuServiceGenerateUnique:
    """Tests for SkuService.generate_unique method."""

    def test_first_draw_free(self, mock_store, fixed_rng):
        """Returns the first SKU the store does not know."""
        service = SkuService(store=mock_store, rng=fixed_rng)

        sku = service.generate_unique(SkuComponents(type="Shirt", color="Black", size="XL"))

        assert sku == "SHI-BLA-XL-052"
        mock_store.sku_exists.assert_called_once_with("SHI-BLA-XL-052")

    def test_redraws_on_collision(self, mock_store, fixed_rng):
        """Colliding suffixes are redrawn."""
        fixed_rng.randint.side_effect = [1, 2, 3]
        mock_store.sku_exists.side_effect = [True, True, False]
        service = SkuService(store=mock_store, rng=fixed_rng)

        sku = service.generate_unique(SkuComponents(type="Shirt", color="Black", size="XL"))

        assert sku == "SHI-BLA-XL-003"
        assert mock_store.sku_exists.call_count == 3

    def test_exhausted_attempts_raise(self, mock_store, fixed_rng):
        """Every draw colliding raises SKUGenerationError."""
        mock_store.sku_exists.return_value = True
        service = SkuService(store=mock_store, rng=fixed_rng)

        with pytest.raises(SKUGenerationError) as exc_info:
            service.generate_unique(SkuComponents(type="Shirt", color="Black", size="XL"))

        assert exc_info.value.code == "SKU_GENERATION_EXHAUSTED"
        assert exc_info.value.details["last_sku"] == "SHI-BLA-XL-052"
        assert mock_store.sku_exists.call_count == settings.sku_max_generation_attempts

    def test_default_store_from_database(self, mock_db, mock_supabase):
        """Without an explicit store, the Supabase-backed one is used."""
        mock_supabase.set_table_data("inventory_items", [
            {"id": "1", "sku": "SHI-BLA-XL-052", "name": "Black Tee"}
        ])
        rng = MagicMock()
        rng.randint.side_effect = [52, 53]
        service = SkuService(rng=rng)

        sku = service.generate_unique(SkuComponents(type="Shirt", color="Black", size="XL"))

        assert sku == "SHI-BLA-XL-053"
