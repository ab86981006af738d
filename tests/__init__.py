"""
Tests for the HTTP Pipelining Checker
"""
