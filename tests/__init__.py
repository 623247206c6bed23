"""
Test suite for SeeScan Capture.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_barcode_parser.py -v
"""
