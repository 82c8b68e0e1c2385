"""CSV import/export package."""

from subtracker.services.csv_codec.codec import (
    HEADER,
    CSVCodec,
    CSVCodecError,
    CSVFileError,
    CSVFormatError,
    parse_cost,
    quote,
    single_line,
    split_row,
)

__all__ = [
    "HEADER",
    "CSVCodec",
    "CSVCodecError",
    "CSVFileError",
    "CSVFormatError",
    "parse_cost",
    "quote",
    "single_line",
    "split_row",
]
