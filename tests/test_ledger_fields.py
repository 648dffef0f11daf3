import pytest

from services import ledger_fields as lf


def test_variant_table_order_is_stable():
    assert lf.FIELD_VARIANTS["fnsku"] == ("FNSKU", "fnsku", "fnskuCode", "FnSku", "FNSKU Code")
    assert lf.FIELD_VARIANTS["asin"] == ("ASIN", "asin", "Asin")
    assert lf.FIELD_VARIANTS["sku"] == ("SKU", "sku", "SellerSKU", "sellerSku", "MSKU", "msku")
    assert lf.FIELD_VARIANTS["fulfillmentCenterId"][0] == "fulfillmentCenterId"
    assert lf.FIELD_VARIANTS["fulfillmentCenterId"][-1] == "Facility"
    assert lf.FIELD_VARIANTS["quantity"][-1] == "postedQuantity"


def test_first_present_skips_blank_values():
    row = {"FNSKU": "", "fnsku": None, "fnskuCode": "X9"}
    assert lf.first_present(row, lf.FIELD_VARIANTS["fnsku"]) == "X9"


def test_first_present_respects_order_when_several_match():
    row = {"MSKU": "from-msku", "SellerSKU": "from-seller"}
    assert lf.first_present(row, lf.FIELD_VARIANTS["sku"]) == "from-seller"


def test_lookup_is_case_sensitive():
    row = {"Fnsku": "X1", "FNSKU CODE": "X2"}
    assert lf.resolve_identity(row)["fnsku"] == ""


def test_resolve_identity_alternate_schema():
    row = {
        "FNSKU Code": "X1",
        "Asin": "A1",
        "MSKU": "S1",
        "Fulfillment Center": "BOM5",
        "Quantity Amount": "7",
    }
    assert lf.resolve_identity(row) == {
        "fnsku": "X1",
        "asin": "A1",
        "sku": "S1",
        "fulfillmentCenterId": "BOM5",
    }
    assert lf.resolve_quantity(row) == "7"


def test_missing_fields_resolve_to_empty_string():
    assert lf.resolve_identity({}) == {"fnsku": "", "asin": "", "sku": "", "fulfillmentCenterId": ""}
    assert lf.resolve_quantity({}) is None


def test_resolution_is_pure():
    row = {"FNSKU": "X1", "asin": "A1", "sku": "S1", "facility_id": "FC1", "Qty": "3"}
    snapshot = dict(row)
    first = (lf.resolve_identity(row), lf.resolve_quantity(row))
    second = (lf.resolve_identity(row), lf.resolve_quantity(row))
    assert first == second
    assert row == snapshot


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1,234", 1234.0),
        ("-56", -56.0),
        ("  12.5 ", 12.5),
        ("+3", 3.0),
        ("-1,000,000", -1000000.0),
        ("0", 0.0),
        (4, 4.0),
        (".5", 0.5),
        ("1e3", 1000.0),
    ],
)
def test_parse_quantity_numbers(raw, expected):
    assert lf.parse_quantity(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["abc", "", "   ", None, "nan", "inf", "12abc", True, "1_000", "\u0661\u0662", "1e999", "--3", "."],
)
def test_parse_quantity_rejects_non_numbers(raw):
    assert lf.parse_quantity(raw) is None
