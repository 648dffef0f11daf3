import pytest

from services.report_errors import MalformedReportError
from services.report_parser import parse_delimited_records


HEADER = "FNSKU\tASIN\tSKU\tfulfillmentCenterId\tQuantity"


def test_header_keys_are_kept_verbatim_and_in_order():
    text = "Date\tFNSKU Code\tQuantity Amount\n2025-11-01\tX1\t5\n"
    records = parse_delimited_records(text)
    assert records == [{"Date": "2025-11-01", "FNSKU Code": "X1", "Quantity Amount": "5"}]
    assert list(records[0].keys()) == ["Date", "FNSKU Code", "Quantity Amount"]


def test_bom_and_blank_lines_are_skipped():
    text = "\ufeff\n\n" + HEADER + "\r\n\r\nX1\tA1\tS1\tFC1\t10\r\n\n   \nX2\tA2\tS2\tFC2\t-3\r\n"
    records = parse_delimited_records(text)
    assert len(records) == 2
    assert "FNSKU" in records[0]
    assert records[1]["Quantity"] == "-3"


def test_record_count_matches_non_blank_data_lines():
    rows = [f"X{i}\tA{i}\tS{i}\tFC1\t{i}" for i in range(25)]
    text = "\n".join([HEADER, *rows[:10], "", *rows[10:], ""])
    assert len(parse_delimited_records(text)) == 25


def test_short_rows_are_padded_and_long_rows_truncated():
    text = HEADER + "\nX1\tA1\n" + "X2\tA2\tS2\tFC2\t4\textra\tmore\n"
    short, long_ = parse_delimited_records(text)
    assert short == {"FNSKU": "X1", "ASIN": "A1", "SKU": "", "fulfillmentCenterId": "", "Quantity": ""}
    assert long_ == {"FNSKU": "X2", "ASIN": "A2", "SKU": "S2", "fulfillmentCenterId": "FC2", "Quantity": "4"}


def test_stray_quotes_are_kept_literally():
    text = 'Title\tQuantity\n12" pan\t3\nsay "hi" there\t4\n'
    records = parse_delimited_records(text)
    assert records[0] == {"Title": '12" pan', "Quantity": "3"}
    assert records[1] == {"Title": 'say "hi" there', "Quantity": "4"}


def test_unterminated_quote_does_not_swallow_following_rows():
    text = 'Title\tQuantity\n"broken\t1\nok\t2\n'
    records = parse_delimited_records(text)
    assert len(records) == 2
    assert records[1] == {"Title": "ok", "Quantity": "2"}


def test_quoted_fields_are_unwrapped():
    text = 'Title\tQuantity\n"Widget, large"\t"1,234"\n'
    assert parse_delimited_records(text) == [{"Title": "Widget, large", "Quantity": "1,234"}]


def test_header_only_document_has_no_records():
    assert parse_delimited_records(HEADER + "\n") == []


@pytest.mark.parametrize("text", ["", "\ufeff", "\n\n  \r\n"])
def test_missing_header_raises_malformed(text):
    with pytest.raises(MalformedReportError):
        parse_delimited_records(text)


def test_malformed_error_preview_is_bounded():
    text = " " * 1000
    with pytest.raises(MalformedReportError) as excinfo:
        parse_delimited_records(text)
    assert len(excinfo.value.preview) == 300


def test_stray_carriage_return_inside_a_row_is_kept_as_space():
    text = "FNSKU\tTitle\tQuantity\nX1\tWidget\rlarge\t5\nX2\tok\t1\n"
    records = parse_delimited_records(text)
    assert records == [
        {"FNSKU": "X1", "Title": "Widget large", "Quantity": "5"},
        {"FNSKU": "X2", "Title": "ok", "Quantity": "1"},
    ]


def test_cr_only_line_endings():
    records = parse_delimited_records("FNSKU\tQuantity\rX1\t5\rX2\t1\r")
    assert records == [
        {"FNSKU": "X1", "Quantity": "5"},
        {"FNSKU": "X2", "Quantity": "1"},
    ]


def test_crlf_endings_mixed_with_stray_carriage_returns():
    text = "FNSKU\tTitle\tQuantity\r\nX1\tA\rB\t5\r\n\r\nX2\tC\t-2\r\n"
    records = parse_delimited_records(text)
    assert len(records) == 2
    assert records[0]["Title"] == "A B"
    assert records[1]["Quantity"] == "-2"
