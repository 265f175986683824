"""
Extract Layer - Pure I/O to External Sources

This layer handles all data loading with no business logic.
- No imports from transform or load layers
- Pure functions that return raw data
- Handles downloads, decompression, CSV parsing
"""
