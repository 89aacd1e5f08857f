"""
app/parsing package marker.
"""

from app.parsing.csv_tokenizer import split_csv_line, tokenize_csv

__all__ = [
    "split_csv_line",
    "tokenize_csv",
]
