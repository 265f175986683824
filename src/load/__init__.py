"""
Load Layer - Report Output

This layer handles all output operations.
- Local file storage (Parquet, CSV)
- Bar charts and the markdown report
- No business logic, just I/O operations
"""
