"""
zipclass Test Suite

Test structure:
- unit/: Fast unit tests (no network, fake decoder where possible)
- integration/: End-to-end collection from real zip archives built in tmp_path
"""
