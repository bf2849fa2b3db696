"""Test suite for gnss_diag."""
